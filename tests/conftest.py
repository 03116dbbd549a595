import pytest

from easydb import DB, Settings
from tests.utils.executor import RecordingExecutor


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def db(executor: RecordingExecutor) -> DB:
    return DB(Settings(_env_file=None), executor=executor)
