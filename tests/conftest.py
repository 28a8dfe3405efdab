import pytest

FULL_SECTIONS = {
    "problemPainPoint": "People forget ideas on walks.",
    "targetCustomer": "Founders who think out loud.",
    "marketSize": "Millions of note-taking app users.",
    "validationPlan": "Landing page with a waitlist.",
    "firstSteps": "Build a voice capture prototype.",
    "nameOptions": "• IdeaSpot\n• Spark\n• Murmur\n• Loop\n• Echo",
}


@pytest.fixture
def full_sections():
    return dict(FULL_SECTIONS)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "GENAI_API_KEY",
        "GENAI_MODEL",
        "GENAI_MAX_OUTPUT_TOKENS",
        "IDEASPOT_SECTIONS_FILE",
        "IDEASPOT_REQUIRE_AUTH",
        "FIREBASE_PROJECT_ID",
        "GOOGLE_CLOUD_PROJECT",
    ):
        monkeypatch.delenv(name, raising=False)
