import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- TestRail Configuration ---
# Replace with your actual TestRail instance URL
TESTRAIL_BASE_URL = os.getenv("TESTRAIL_BASE_URL", "https://teambrix.testrail.net/").rstrip("/")

# Every API call is routed through this path on the instance
API_PATH = "index.php?/api/v2/"

# Properties file holding testrail.user and testrail.apikey
CREDENTIALS_PATH = os.getenv("TESTRAIL_CONFIG_PATH", "src/main/resources/config.properties")
USER_KEY = "testrail.user"
APIKEY_KEY = "testrail.apikey"

# Defaults for the daily run
PROJECT_ID = int(os.getenv("TESTRAIL_PROJECT_ID", "1"))
RUN_NAME = os.getenv("TESTRAIL_RUN_NAME", "Automated Run")

REQUEST_TIMEOUT = int(os.getenv("TESTRAIL_TIMEOUT", "30"))  # seconds

# --- Run / Result Formatting ---
RUN_TIMESTAMP_FORMAT = "%m/%d/%Y %H:%M"
COMMENT_PREFIX = "Automated test - "

# --- Status IDs ---
STATUS_PASSED = 1
STATUS_FAILED = 0

# Returned wherever a run could not be found or created
NO_RUN = -1
