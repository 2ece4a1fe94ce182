"""Weekly menu delivery from a Kakao channel to Slack."""

__version__ = "0.1.0"
