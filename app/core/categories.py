"""
Read-only category and topic lists shared by the /sentiment and /lucky handlers.
"""

# Used when a client sends no usable categories.
DEFAULT_CATEGORIES = (
    "Bullishness",
    "Fear",
    "Hype",
    "Uncertainty",
    "Long-term conviction",
)

MAX_CATEGORIES = 8

LUCKY_FLAVOR_CATEGORIES = DEFAULT_CATEGORIES + ("Funny", "Random")

LUCKY_TOPICS = (
    "markets today",
    "crypto volatility",
    "tech stocks and earnings",
    "AI bubble",
    "energy sector and oil",
    "Fed decisions and interest rates",
    "SPY and overall market sentiment",
    "HFT firms",
    "market manipulation",
)
