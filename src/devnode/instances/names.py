"""Human-memorable names for detached instances.

Names are ``<adjective>_<noun>`` pairs, e.g. ``brave_walrus``. They are
unique against the instances known when the name is generated.
"""

from __future__ import annotations

__all__ = [
    "ADJECTIVES",
    "MAX_NAME_ATTEMPTS",
    "NOUNS",
    "create_instance_name",
]

import random
from collections.abc import Collection

# Random pairs tried before falling back to numbered suffixes
MAX_NAME_ATTEMPTS = 1000

ADJECTIVES: tuple[str, ...] = (
    "agile", "amber", "ancient", "bold", "brave", "bright", "brisk", "calm",
    "clever", "cosmic", "crimson", "curious", "daring", "dusty", "eager",
    "elegant", "fancy", "fearless", "fluffy", "frosty", "gentle", "gilded",
    "glossy", "golden", "grumpy", "happy", "hasty", "hidden", "humble",
    "icy", "jolly", "keen", "lively", "lucky", "mellow", "mighty", "misty",
    "nimble", "noble", "patient", "plucky", "polite", "proud", "quick",
    "quiet", "rapid", "rusty", "shiny", "silent", "silver", "sleepy", "sly",
    "smooth", "snappy", "spicy", "steady", "stormy", "sunny", "swift",
    "tidy", "tiny", "vivid", "wild", "witty", "zesty",
)

NOUNS: tuple[str, ...] = (
    "albatross", "badger", "beaver", "bison", "bobcat", "camel", "cheetah",
    "cobra", "condor", "coyote", "crane", "dingo", "dolphin", "eagle",
    "falcon", "ferret", "finch", "gazelle", "gecko", "gopher", "heron",
    "hippo", "ibis", "iguana", "jackal", "jaguar", "koala", "lemur",
    "leopard", "llama", "lynx", "marmot", "meerkat", "mongoose", "moose",
    "narwhal", "newt", "ocelot", "octopus", "otter", "owl", "panda",
    "panther", "parrot", "pelican", "penguin", "puffin", "quokka", "rabbit",
    "raccoon", "raven", "salmon", "seal", "sparrow", "squid", "tapir",
    "tiger", "toucan", "turtle", "urchin", "viper", "walrus", "weasel",
    "wombat", "yak", "zebra",
)


def _random_pair(rng: random.Random) -> str:
    return f"{rng.choice(ADJECTIVES)}_{rng.choice(NOUNS)}"


def create_instance_name(
    taken: Collection[str] = (),
    rng: random.Random | None = None,
) -> str:
    """Create an instance name not present in ``taken``.

    Random pairs are tried up to MAX_NAME_ATTEMPTS times. If every attempt
    collides, the last pair gets the lowest free numeric suffix
    (``brave_walrus_2``), so generation always terminates.

    Args:
        taken: Names already in use.
        rng: Random source, for deterministic tests.

    Returns:
        A name not in ``taken``.
    """
    rng = rng or random.Random()
    taken = set(taken)

    candidate = _random_pair(rng)
    for _ in range(MAX_NAME_ATTEMPTS):
        if candidate not in taken:
            return candidate
        candidate = _random_pair(rng)

    suffix = 2
    while f"{candidate}_{suffix}" in taken:
        suffix += 1
    return f"{candidate}_{suffix}"
