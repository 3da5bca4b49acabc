"""Upstream endpoints, throttling delays, and output layout."""

from __future__ import annotations

import os

# --- Smithery API ---
SMITHERY_API_BASE = "https://api.smithery.ai"
SMITHERY_SERVER_URL = "https://smithery.ai/server"
SMITHERY_PAGE_SIZE = 100

# --- Official MCP Registry API ---
REGISTRY_API_BASE = "https://registry.modelcontextprotocol.io/v0.1"
REGISTRY_META_KEY = "io.modelcontextprotocol.registry/official"

# npm -> npx, pypi -> uvx, oci -> docker
SUPPORTED_REGISTRY_TYPES = ("npm", "pypi", "oci")

# --- GitHub API ---
GITHUB_API_BASE = "https://api.github.com"
GITHUB_PROGRESS_EVERY = 50

# --- HTTP ---
USER_AGENT = "MCP-Dock-Sync/1.0"
HTTP_TIMEOUT = 30.0

# Seconds between successive requests. Fixed, not adaptive.
LIST_FETCH_DELAY = 0.2
DETAIL_FETCH_DELAY = 0.2
GITHUB_FETCH_DELAY = 0.1

# --- Output ---
OUTPUT_DIR = "registry"
OFFICIAL_SUBDIR = "official"
DETAILS_DIR = "details"
INDEX_FILE = "index.json"
TOP_N_REPORT = 10


def smithery_api_base() -> str:
    return os.environ.get("SMITHERY_API_BASE") or SMITHERY_API_BASE


def registry_api_base() -> str:
    return os.environ.get("MCP_REGISTRY_API_BASE") or REGISTRY_API_BASE


def github_token() -> str | None:
    return os.environ.get("GITHUB_TOKEN") or None
