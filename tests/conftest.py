import pytest

from brand_visibility.core.config import settings

# Override settings for tests: no network generator, plain-text logs
settings.openai_api_key = ""
settings.app_env = "test"
settings.log_json = False

from brand_visibility.analytics.types import BrandProject  # noqa: E402
from brand_visibility.services.repository import InMemoryRepository  # noqa: E402
from brand_visibility.services.visibility_service import VisibilityService  # noqa: E402


@pytest.fixture
def project() -> BrandProject:
    return BrandProject(
        id="proj-1",
        brand_name="Klio AI",
        keywords=["AI tutoring", "homework help"],
        competitors=["TutorPlus", "MindCoach"],
        tracked_queries=[],
    )


@pytest.fixture
def repository(project) -> InMemoryRepository:
    repo = InMemoryRepository()
    repo.add_project(project)
    return repo


@pytest.fixture
def service(repository) -> VisibilityService:
    return VisibilityService(repository)
