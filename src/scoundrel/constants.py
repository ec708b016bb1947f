from typing import Dict

# Player
STARTING_HP: int = 20
MAX_HP: int = 20

# Rooms
CARDS_PER_ROOM: int = 4
CARDS_TO_INTERACT: int = 3

# Deck composition
DECK_SIZE: int = 44
MIN_RANK: int = 2
MAX_RANK: int = 14  # Ace
WEAPON_MAX_RANK: int = 10
POTION_MAX_RANK: int = 10

RANK_NAMES: Dict[int, str] = {
    2: "2",
    3: "3",
    4: "4",
    5: "5",
    6: "6",
    7: "7",
    8: "8",
    9: "9",
    10: "10",
    11: "Jack",
    12: "Queen",
    13: "King",
    14: "Ace",
}

RANK_LABELS: Dict[int, str] = {**{r: str(r) for r in range(2, 11)}, 11: "J", 12: "Q", 13: "K", 14: "A"}
