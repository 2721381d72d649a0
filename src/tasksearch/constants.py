#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Constants and default values for the tasksearch library.

This module centralizes the hardcoded values and default configuration
constants used across tasksearch.

Constants are organized by category:
1. Type Definitions - Literal types for configuration values
2. Search Defaults - Matching, ranking and debounce settings
3. Scoring Tiers - Relevance points awarded per field
4. Session Defaults - History and suggestion limits
"""

from __future__ import annotations

from typing import Literal

# =============================================================================
# Type Definitions
# =============================================================================

MatchTypeName = Literal["exact", "substring", "word", "fuzzy", "prefix"]
SortByName = Literal["relevance", "recent", "name"]
FilterTypeName = Literal["status", "priority", "dueDate"]
PriorityName = Literal["low", "medium", "high"]

# =============================================================================
# Search Defaults
# =============================================================================

DEFAULT_SEARCH_FIELDS: tuple[str, ...] = ("title", "description")
DEFAULT_MATCH_TYPE: MatchTypeName = "substring"
DEFAULT_CASE_INSENSITIVE = True
DEFAULT_RANK_RESULTS = True
DEFAULT_DEBOUNCE_DELAY_MS = 300
DEFAULT_SORT_BY: SortByName = "relevance"

# Fuzzy scores must be strictly greater than this to count as a match
DEFAULT_FUZZY_THRESHOLD = 0.5

FUZZY_EXACT_SCORE = 1.0
FUZZY_SUBSTRING_SCORE = 0.9
FUZZY_WORD_SCORE = 0.8

QUOTE_CHAR = '"'
TOKEN_SEPARATOR = " "

# =============================================================================
# Scoring Tiers
# =============================================================================

SCORE_EXACT = 100
SCORE_PREFIX = 75
SCORE_SUBSTRING = 50
SCORE_WORD = 25

# =============================================================================
# Session Defaults
# =============================================================================

DEFAULT_HISTORY_LIMIT = 10
DEFAULT_MAX_SUGGESTIONS = 5
DEFAULT_MIN_SUGGESTION_LENGTH = 2

PRIORITY_VALUES: tuple[PriorityName, ...] = ("high", "medium", "low")

# Filter bar presets: name -> (filter type, value); "all" means no filter
FILTER_PRESETS: dict[str, tuple[FilterTypeName, object] | None] = {
    "all": None,
    "completed": ("status", True),
    "pending": ("status", False),
    "high": ("priority", "high"),
    "medium": ("priority", "medium"),
    "low": ("priority", "low"),
}

CONFIG_FILENAMES = [".tasksearch.toml", ".tasksearch.yaml", ".tasksearch.yml", ".tasksearch.json"]
CONFIG_ENV_VAR = "TASKSEARCH_CONFIG"
