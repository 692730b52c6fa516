import pathlib

# Path constants
ASSETS_PATH = pathlib.Path("assets")
OUTPUT_PATH = pathlib.Path("output")

# Layer configuration: (name, directory, required)
LAYERS = [
    ("Background", "BACKGROUND", False),
    ("Base", "BASE", True),
    ("Eyes", "EYE", False),
    ("Head", "HEAD", False),
    ("MouthBase", "MOUTH/BASE", False),
    ("MouthItem", "MOUTH/ITEM", False),
    ("FacialHair", "FACIAL_HAIR", False),
    ("Mask", "MASK", False),
    ("Clothes", "CLOTHES", False),
    ("ClothesAddon", "CLOTHES/ADDON", False),
]

LAYER_NAMES = [name for name, _, _ in LAYERS]

# Layers the user picks from directly, in picker order
PICKER_LAYERS = [
    "Head",
    "Eyes",
    "Base",
    "MouthBase",
    "MouthItem",
    "FacialHair",
    "Mask",
    "Clothes",
    "Background",
]

# Paint order, bottom to top. Virtual slots are filled by the compositor.
Z_ORDER = [
    "Background",
    "Base",
    "Clothes",
    "ClothesAddon",
    "FacialHair",
    "MouthBase",
    "MouthItem",
    "TysonTattoo",
    "NinjaEyes",
    "Mask",
    "Eyes",
    "Astronaut",
    "HannibalMask",
    "Head",
]

# Colour vocabulary for grouped variants (lower-case name -> hex)
COLOR_HEX = {
    "black": "#000000",
    "white": "#FFFFFF",
    "grey": "#808080",
    "gray": "#808080",
    "silver": "#C0C0C0",
    "red": "#E53935",
    "maroon": "#800000",
    "pink": "#F48FB1",
    "orange": "#FB8C00",
    "gold": "#FFD700",
    "yellow": "#FDD835",
    "green": "#43A047",
    "neon green": "#39FF14",
    "lime": "#C0CA33",
    "teal": "#00897B",
    "cyan": "#00BCD4",
    "blue": "#1E88E5",
    "navy": "#1A237E",
    "purple": "#8E24AA",
    "brown": "#6D4C41",
    "tan": "#D2B48C",
    "camo": "#78866B",
}

# Suit matrix vocabulary
SUIT_COLORS = ["black", "orange"]
SUIT_ACCESSORY_TYPES = ["tie", "bow"]
SUIT_GROUP_NAME = "Suit"
SUIT_CANONICAL = ("black", "tie", "red")

# Overlay addon worn over a Tee or Tank Top
ADDON_TOKENS = ("chia", "farmer")
ADDON_COLORS = ["blue", "brown", "orange", "red"]
ADDON_GROUP_NAME = "Chia Farmer"
DEFAULT_ADDON_BASE = "Tee White"

# Families whose base form keeps a colour picker even with a single member
ALWAYS_GROUP = ["Matrix Lenses"]

# Family tags resolved once at manifest load: tag -> (layer, substrings)
FAMILIES = {
    "tee": ("Clothes", ("tee", "tank-top", "tank top")),
    "astronaut": ("Clothes", ("astronaut",)),
    "mcd": ("Clothes", ("mcd",)),
    "hannibal": ("Mask", ("hannibal",)),
    "hair_mask": ("Mask", ("clown", "wig")),
    "covering_mask": ("Mask", ("ski mask", "balaclava", "bandana")),
    "tyson": ("Eyes", ("tyson",)),
    "ninja_eyes": ("Eyes", ("ninja turtle",)),
    "cap": ("Head", ("cap",)),
    "beanie": ("Head", ("beanie",)),
    "centurion": ("Head", ("centurion",)),
}

# Hairstyle-implying masks and the Head families they rule out
MASK_HEAD_CONFLICTS = {
    "hair_mask": ("cap", "beanie"),
}

# Companion renditions: (layer, normal label, alternate label, trigger layer).
# The alternate is used while the trigger layer is occupied.
COMPANIONS = [
    ("Head", "Centurion", "Centurion mask", "Mask"),
    ("Clothes", "McD Uniform", "McD Uniform capless", "Head"),
]

# Randomizer weights. "none" is the share of the empty option, "traits"
# pins shares to labels, "suit" is the share of the suit matrix pool.
# Remaining mass is spread uniformly over the other options.
RANDOM_WEIGHTS = {
    "Mask": {"none": 0.85},
    "MouthBase": {"traits": {"Numb": 0.70}},
    "Clothes": {"suit": 0.5},
    "ClothesAddon": {"none": 0.90},
}

MAX_RULE_PASSES = 8

CANVAS_SIZE = (800, 800)
RENDER_DEBOUNCE_S = 0.05

# Export filename limits
FILENAME_PREFIX = "Wojak"
FILENAME_MAX_LENGTH = 120
