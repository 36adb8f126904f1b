from __future__ import annotations

import re
import secrets

ADJECTIVES = [
    "admiring", "affectionate", "agitated", "amazing", "angry", "awesome", "blissful", "bold",
    "boring", "brave", "busy", "charming", "clever", "compassionate", "competent", "confident",
    "cool", "cranky", "dazzling", "determined", "distracted", "dreamy", "eager", "ecstatic",
    "elastic", "elated", "elegant", "eloquent", "epic", "exciting", "fervent", "festive",
    "flamboyant", "focused", "friendly", "frosty", "funny", "gallant", "gifted", "goofy",
    "gracious", "great", "happy", "hardcore", "heuristic", "hopeful", "hungry", "infallible",
    "inspiring", "intelligent", "interesting", "jolly", "jovial", "keen", "kind", "laughing",
    "loving", "lucid", "magical", "modest", "musing", "mystifying", "naughty", "nervous",
    "nice", "nifty", "nostalgic", "objective", "optimistic", "peaceful", "pedantic", "pensive",
    "practical", "priceless", "quirky", "quizzical", "relaxed", "reverent", "romantic", "sad",
    "serene", "sharp", "silly", "sleepy", "stoic", "strange", "stupefied", "suspicious",
    "sweet", "tender", "thirsty", "trusting", "unruffled", "upbeat", "vibrant", "vigilant",
    "vigorous", "wizardly", "wonderful", "xenodochial", "youthful", "zealous", "zen",
]

NOUNS = [
    "albattani", "allen", "archimedes", "babbage", "banach", "bardeen", "bartik", "bell",
    "bhabha", "blackwell", "bohr", "booth", "borg", "bose", "brahmagupta", "brattain",
    "brown", "carson", "cerf", "chandrasekhar", "clarke", "curie", "darwin", "davinci",
    "dijkstra", "einstein", "elion", "engelbart", "euclid", "euler", "faraday", "fermat",
    "fermi", "feynman", "franklin", "gagarin", "galileo", "gates", "gauss", "goldberg",
    "goodall", "hamilton", "hawking", "heisenberg", "hermann", "hodgkin", "hofstadter",
    "hopper", "hypatia", "jackson", "jang", "jennings", "johnson", "kalam", "kepler",
    "khorana", "knuth", "kowalevski", "lalande", "lamarr", "lamport", "leakey", "lederberg",
    "lehmann", "liskov", "lovelace", "lumiere", "mahavira", "mayer", "mccarthy", "mcclintock",
    "meitner", "mendel", "merkle", "mirzakhani", "morse", "newton", "nobel", "noether",
    "pascal", "pasteur", "payne", "perlman", "pike", "poincare", "ptolemy", "raman",
    "ramanujan", "ride", "ritchie", "rosalind", "sammet", "shannon", "shockley", "sinoussi",
    "stallman", "swanson", "tesla", "thompson", "torvalds", "turing", "varahamihira",
    "villani", "wescoff", "wiles", "williams", "wilson", "wozniak", "wright", "yalow", "zhukovsky",
]

_SEPARATORS = re.compile(r"[\s_\-]+")


def random_name() -> str:
    """Adjective-noun token, e.g. `jolly-hopper`."""
    raw = f"{secrets.choice(ADJECTIVES)}_{secrets.choice(NOUNS)}"
    return _SEPARATORS.sub("-", raw)
