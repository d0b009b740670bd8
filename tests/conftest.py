"""Pytest fixtures for the command generator tests."""

import pytest

from commandgen.catalog import (
    Catalog,
    Category,
    DifficultyDegree,
    Gender,
    Gesture,
    GPSRObject,
    ObjectType,
    PersonName,
    PredefinedQuestion,
    Room,
    SpecificLocation,
)
from commandgen.generator import SeededRandom, WildcardReplacer


@pytest.fixture
def catalog():
    """A small catalog with known sizes per kind and tier."""
    kitchen = Room("kitchen")
    bedroom = Room("bedroom")
    drinks = Category("drinks", "fridge")
    snacks = Category("snacks", "kitchen table")

    return Catalog(
        categories=[drinks, snacks],
        gestures=[
            Gesture("waving", DifficultyDegree.EASY),
            Gesture("calling", DifficultyDegree.HIGH),
        ],
        locations=[
            kitchen,
            bedroom,
            SpecificLocation("fridge", kitchen, is_beacon=True, is_placement=True),
            SpecificLocation("sink", kitchen, is_beacon=True),
            SpecificLocation("bed", bedroom, is_placement=True),
        ],
        names=[
            PersonName("John", Gender.MALE),
            PersonName("Bob", Gender.MALE),
            PersonName("Mary", Gender.FEMALE),
            PersonName("Anna", Gender.FEMALE),
        ],
        objects=[
            GPSRObject("coke", drinks, ObjectType.KNOWN, DifficultyDegree.EASY),
            GPSRObject("water", drinks, ObjectType.ALIKE, DifficultyDegree.EASY),
            GPSRObject("chips", snacks, ObjectType.KNOWN, DifficultyDegree.EASY),
            GPSRObject("caviar", snacks, ObjectType.KNOWN, DifficultyDegree.HIGH),
        ],
        questions=[
            PredefinedQuestion("What time is it?", "The current time", DifficultyDegree.EASY),
            PredefinedQuestion("Who wrote C?", "Dennis Ritchie", DifficultyDegree.HIGH),
        ],
    )


@pytest.fixture
def replacer(catalog):
    """A fresh session over the small catalog at the easiest tier."""
    return WildcardReplacer(catalog, SeededRandom(42), DifficultyDegree.EASY)
