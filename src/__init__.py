"""Rovo Relay

A streaming relay that serves OpenAI-style chat completions from a rotating
pool of upstream credentials.
"""

from importlib.metadata import PackageNotFoundError, version

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

try:
    __version__ = version("rovo-relay")
except PackageNotFoundError:
    # Source checkout without an installed distribution
    __version__ = "1.0.0"
__author__ = "Rovo Relay"
