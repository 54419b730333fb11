import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent / '.env'
load_dotenv(dotenv_path=env_path)

# Versioned URL of the satellite catalog document.
# Or set it in the .env file as SPACE_EYE_CATALOG_URL
CatalogUrl = os.getenv("SPACE_EYE_CATALOG_URL", "https://config.space-eye.info/v1/config.json")

# Sent with every catalog and image request
UserAgent = os.getenv("SPACE_EYE_USER_AGENT", "space-eye/0.1 (+https://space-eye.info)")

# Seconds before a catalog or image request is abandoned
RequestTimeout = 30

# Display to target when --display is not given (1 is the main display on macOS)
DefaultDisplayId = int(os.getenv("SPACE_EYE_DISPLAY", "1"))

# Render settings used when no command-line override is given.
# scaling: "stretch", "none" or "fit"
# background_color: "#RRGGBB[AA]" or an (r, g, b, a) tuple of floats from 0.0 to 1.0
RenderSettings = {
    "scaling": "fit",
    "background_color": (0.0, 0.0, 0.0, 1.0),
    "allow_clipping": True,
}

# Storage settings: directory (blank for the per-user application data directory)
StorageSettings = {
    "directory": os.getenv("SPACE_EYE_DATA_DIR", ""),
    "log_file": "space-eye.log",
}

# Scheduler settings for --watch. interval_seconds of 0 follows the
# selected image source's own update interval.
SchedulerSettings = {
    "interval_seconds": 0,
    "jitter_seconds": 30,
}
