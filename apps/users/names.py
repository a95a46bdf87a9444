"""Playful display names offered on registration and in profile settings."""

import random

ADJECTIVES = [
    "Happy", "Lucky", "Sunny", "Brave", "Calm", "Eager", "Fancy", "Gentle",
    "Jolly", "Kind", "Lively", "Nice", "Proud", "Silly", "Witty", "Zealous",
    "Cosmic", "Magic", "Super", "Mega", "Hyper", "Ultra", "Rapid", "Swift",
]

NOUNS = [
    "Tiger", "Lion", "Bear", "Eagle", "Wolf", "Fox", "Cat", "Dog",
    "Panda", "Koala", "Hawk", "Owl", "Shark", "Whale", "Dolphin", "Star",
    "Comet", "Planet", "Moon", "Sun", "Galaxy", "Nebula", "Rocket", "Pilot",
]


def generate_random_name(rng=random):
    """Return an "<Adjective> <Noun>" name such as "Swift Panda"."""
    return f"{rng.choice(ADJECTIVES)} {rng.choice(NOUNS)}"
