import os
import sys
import tempfile
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Keep tests hermetic: logs go to a scratch dir, no real API settings leak in.
os.environ.setdefault("CAMPAMENTO_LOGS_DIR", tempfile.mkdtemp(prefix="campamento-logs-"))
for _var in (
    "CAMPAMENTO_API_URL",
    "CAMPAMENTO_API_TOKEN",
    "CAMPAMENTO_HIERARCHY_ROOT",
    "CAMPAMENTO_REFRESH_POLICY",
):
    os.environ.pop(_var, None)
