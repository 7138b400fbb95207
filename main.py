import logging
import sys

from strava_recent.auth import StravaAuth
from strava_recent.client import StravaClient
from strava_recent.config import load_config
from strava_recent.display import print_activities
from strava_recent.errors import ConfigError, StravaError
from strava_recent.utils import configure_logging


def main() -> int:
    try:
        config = load_config()
    except ConfigError as e:
        configure_logging(truncate=False)
        logging.critical("Invalid configuration: %s", e)
        return 1

    configure_logging(config.log_file, truncate=True)

    try:
        auth = StravaAuth(config)
        auth.initialize()
        activities = StravaClient(auth).get_activities(config.activity_limit)
    except KeyboardInterrupt:
        print("\nStopped by user.")
        return 130
    except StravaError as e:
        logging.critical("Fatal Error: %s", e)
        return 1

    print_activities(activities)
    return 0


if __name__ == "__main__":
    sys.exit(main())
