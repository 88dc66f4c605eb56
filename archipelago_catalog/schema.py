from __future__ import annotations

# -----------------------------------------------------------------------------
# Source CSV columns
# -----------------------------------------------------------------------------

NAME_COL = "Game"
STATUS_COL = "Status"
PLATFORM_COL = "Platform"
EMULATOR_COL = "Emulator"
TOOL_COL = "IsArchipelagoTool"

# Column order used when rewriting the source CSV. Unknown columns are kept after these.
SOURCE_COLUMNS = (NAME_COL, STATUS_COL, PLATFORM_COL, EMULATOR_COL, TOOL_COL)

TRUE_VALUES = {"true", "yes", "1"}

# -----------------------------------------------------------------------------
# Dataset artifact keys (read by the site at startup)
# -----------------------------------------------------------------------------

ARTIFACT_GENRES = "Genres"
ARTIFACT_RELEASE_YEAR = "ReleaseYear"
ARTIFACT_MULTIPLAYER = "IsMultiplayer"

# -----------------------------------------------------------------------------
# Source list maintenance
# -----------------------------------------------------------------------------

# Archipelago-specific tools (puzzles, clients, minigames) rather than standalone video games.
ARCHIPELAGO_TOOLS = frozenset(
    {
        "APQuest",
        "Archipelacode",
        "Archipeladoku (Sudoku)",
        "Archipela-Go!",
        "Autopelago",
        "Blockupelago",
        "Bumper Stickers",
        "ChecksFinder",
        "ChecksMate (Chess)",
        "Clique",
        "CrosswordAP",
        "Elementipelago",
        "Jigsaw Puzzle for Archipelago",
        "Musipelago",
        "Nonograhmm",
        "Nonopelagram",
        "Paint",
        "Password Game",
        "Santa Needs YOU!",
        "Twisty Cube",
        "Unfair Flips",
        "Voltorb Flip (from Pokémon HG & SS)",
        "Watery Words",
        "Word Search",
        "Wordipelago",
        "Yacht Dice",
        "Yacht Dice Bliss",
    }
)

# Old name -> canonical name, so lookups hit the right title.
NAME_CORRECTIONS: dict[str, str] = {
    "A Dance Of Fire And Ice": "A Dance of Fire and Ice",
    "CornKidz64": "Corn Kidz 64",
    "Mario is Missing (SNES)": "Mario is Missing!",
    "Plok": "Plok!",
    "Super Mario Land 2: The Golden Coins": "Super Mario Land 2: 6 Golden Coins",
    "Wario Land 1": "Wario Land: Super Mario Land 3",
}


def parse_bool(value: object) -> bool:
    return str(value or "").strip().casefold() in TRUE_VALUES
