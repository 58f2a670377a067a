"""
Application-wide constants for the Genshin Build Card.

Centralizes game codes, thresholds and network settings so the normalizer,
scoring engine and API clients agree on one set of values.
"""

# =============================================================================
# Network Timeouts (seconds)
# =============================================================================

# Default timeout for API requests (general use)
API_TIMEOUT_DEFAULT = 10

# Read timeout for Enka.Network profile fetches (large showcases)
API_TIMEOUT_ENKA_READ = 15


# =============================================================================
# Rate Limiting / Caching
# =============================================================================

# Enka.Network asks clients to stay well under 1 request per second
RATE_LIMIT_ENKA = 0.5

# Fallback cache TTL (seconds) when a snapshot carries no "ttl" field
CACHE_TTL_SNAPSHOT = 60

# Maximum cache entries to prevent unbounded memory growth
CACHE_MAX_SIZE = 256


# =============================================================================
# Enka.Network endpoints
# =============================================================================

ENKA_API_BASE_URL = "https://enka.network/api"
ENKA_UI_BASE_URL = "https://enka.network/ui"
ENKA_USER_AGENT = "GenshinBuildCardApp/1.0"

# Prefix swap turning a side/avatar icon name into the gacha splash art name
AVATAR_ICON_PREFIX = "UI_AvatarIcon_"
GACHA_IMAGE_PREFIX = "UI_Gacha_AvatarImg_"


# =============================================================================
# Snapshot property keys
# =============================================================================

# propMap key holding the character's current level
PROP_LEVEL = "4001"

# fightPropMap keys
FIGHT_PROP_MAX_HP = 2000
FIGHT_PROP_CUR_ATTACK = 2001
FIGHT_PROP_CUR_DEFENSE = 2002
FIGHT_PROP_ELEMENT_MASTERY = 28
FIGHT_PROP_CRITICAL = 20
FIGHT_PROP_CRITICAL_HURT = 22
FIGHT_PROP_CHARGE_EFFICIENCY = 23

# Pyro, electro, hydro, dendro, anemo, geo, cryo damage bonus
FIGHT_PROP_DAMAGE_BONUS_KEYS = (40, 41, 42, 43, 44, 45, 46)

ITEM_TYPE_WEAPON = "ITEM_WEAPON"
ITEM_TYPE_RELIQUARY = "ITEM_RELIQUARY"


# =============================================================================
# Stat codes
# =============================================================================

STAT_LABELS = {
    "FIGHT_PROP_HP": "HP",
    "FIGHT_PROP_HP_PERCENT": "HP%",
    "FIGHT_PROP_ATTACK": "攻撃力",
    "FIGHT_PROP_BASE_ATTACK": "基礎攻撃力",
    "FIGHT_PROP_ATTACK_PERCENT": "攻撃力%",
    "FIGHT_PROP_DEFENSE": "防御力",
    "FIGHT_PROP_DEFENSE_PERCENT": "防御力%",
    "FIGHT_PROP_CRITICAL": "会心率",
    "FIGHT_PROP_CRITICAL_HURT": "会心ダメージ",
    "FIGHT_PROP_CHARGE_EFFICIENCY": "元素チャージ効率",
    "FIGHT_PROP_ELEMENT_MASTERY": "元素熟知",
    "FIGHT_PROP_PHYSICAL_ADD_HURT": "物理ダメージ",
    "FIGHT_PROP_FIRE_ADD_HURT": "炎元素ダメージ",
    "FIGHT_PROP_ELEC_ADD_HURT": "雷元素ダメージ",
    "FIGHT_PROP_WATER_ADD_HURT": "水元素ダメージ",
    "FIGHT_PROP_GRASS_ADD_HURT": "草元素ダメージ",
    "FIGHT_PROP_WIND_ADD_HURT": "風元素ダメージ",
    "FIGHT_PROP_ROCK_ADD_HURT": "岩元素ダメージ",
    "FIGHT_PROP_ICE_ADD_HURT": "氷元素ダメージ",
    "FIGHT_PROP_HEAL_ADD": "与える治癒効果",
}

PERCENT_SUFFIX = "_PERCENT"
DAMAGE_BONUS_MARKER = "_ADD_HURT"
PERCENT_STAT_CODES = frozenset({
    "FIGHT_PROP_CRITICAL",
    "FIGHT_PROP_CRITICAL_HURT",
    "FIGHT_PROP_CHARGE_EFFICIENCY",
    "FIGHT_PROP_HEAL_ADD",
})


# =============================================================================
# Scoring
# =============================================================================

LABEL_CRIT_RATE = STAT_LABELS["FIGHT_PROP_CRITICAL"]
LABEL_CRIT_DAMAGE = STAT_LABELS["FIGHT_PROP_CRITICAL_HURT"]

CRIT_RATE_WEIGHT = 2.0
CRIT_DAMAGE_WEIGHT = 1.0
BASE_STAT_WEIGHT = 1.0

# (SS, S, A) inclusive lower bounds; anything below A is B
RANK_THRESHOLDS_FLOWER_PLUME = (50.0, 45.0, 40.0)
RANK_THRESHOLDS_OTHER_SLOTS = (45.0, 40.0, 30.0)
RANK_THRESHOLDS_TOTAL = (220.0, 200.0, 180.0)

RANK_COLORS = {
    "SS": "#ff4d4d",
    "S": "#ff8c1a",
    "A": "#e6e600",
    "B": "#999999",
}

MAX_SUBSTATS = 4
MAX_CONSTELLATION = 6
MIN_REFINEMENT = 1
MAX_REFINEMENT = 5
