"""
Scraper configuration and constants.
"""

import os
from typing import Final

from dotenv import load_dotenv

load_dotenv()

# DoD contract announcements RSS feed
FEED_URL: Final[str] = os.getenv(
    "FEED_URL",
    "https://www.defense.gov/DesktopModules/ArticleCS/RSS.ashx?ContentType=400&Site=945&max=10"
)

# User agents (feed requests identify the bot, the browser looks like a desktop)
BOT_USER_AGENT: Final[str] = os.getenv(
    "BOT_USER_AGENT",
    "VertaSignalsBot/1.0 (purpose: regulatory-news-monitor)"
)
BROWSER_USER_AGENT: Final[str] = os.getenv(
    "BROWSER_USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120 Safari/537.36"
)

# Timeouts
FEED_TIMEOUT_S: Final[int] = int(os.getenv("FEED_TIMEOUT_S", "30"))
FEED_RETRY_ATTEMPTS: Final[int] = int(os.getenv("FEED_RETRY_ATTEMPTS", "3"))
NAV_TIMEOUT_MS: Final[int] = int(os.getenv("NAV_TIMEOUT_MS", "60000"))
RENDER_SETTLE_MS: Final[int] = int(os.getenv("RENDER_SETTLE_MS", "1000"))

# Batch ingestion
WAIT_MS: Final[int] = int(os.getenv("WAIT_MS", "1500"))
MAX_CONTRACTS: Final[int] = int(os.getenv("MAX_CONTRACTS", "5"))
MAX_ITEMS_CEILING: Final[int] = 20

# Render admission (shared by single-page renders and batch ingestion)
RENDER_MAX_CONCURRENT: Final[int] = int(os.getenv("RENDER_MAX_CONCURRENT", "1"))
RENDER_MAX_PER_WINDOW: Final[int] = int(os.getenv("RENDER_MAX_PER_WINDOW", "20"))
RENDER_WINDOW_SECONDS: Final[float] = float(os.getenv("RENDER_WINDOW_SECONDS", "60"))

# Optional Supabase persistence
SUPABASE_URL: Final[str] = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY: Final[str] = os.getenv("SUPABASE_KEY", "")
SUPABASE_TABLE: Final[str] = os.getenv("SUPABASE_TABLE", "news_events")
SINK_TIMEOUT_S: Final[int] = int(os.getenv("SINK_TIMEOUT_S", "30"))

# HTTP server
PORT: Final[int] = int(os.getenv("PORT", "3000"))
