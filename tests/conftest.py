import sys
import warnings
from pathlib import Path

# Ignore deprecation noise from third-party packages pulled in by the mock server
warnings.filterwarnings("ignore", category=DeprecationWarning, module="fastapi.*")

# Ensure the project root is on sys.path so `noise` and `tools` resolve
PROJECT_ROOT = Path(__file__).resolve().parents[1]
project_root_str = str(PROJECT_ROOT)
if project_root_str not in sys.path:
    sys.path.insert(0, project_root_str)

from tests.fixtures.http_fixtures import *  # noqa: E402, F403
