"""
People example for mockkit.

A Processor depends on Person objects; the tests replace Person behaviour
with mocks so the Processor can be checked in isolation.
"""

from mockkit import Mockable, overloaded


class Person(Mockable):
    """Simple class representing a person."""

    @overloaded
    def __init__(self) -> None:
        self._name = ""
        self._age = 0

    @__init__.variant
    def __init__(self, name: str, age: int) -> None:
        self._name = name
        self._age = age

    def get_name(self) -> str:
        return self._name

    def get_age(self) -> int:
        return self._age


class Processor:
    """Processor class that uses Person as a dependency."""

    def __init__(self):
        self._people: list[Person] = []

    def add_person(self, person: Person) -> None:
        self._people.append(person)

    def get_amount_of_people(self) -> int:
        return len(self._people)

    def get_mean_age(self) -> float:
        return sum(p.get_age() for p in self._people) / self.get_amount_of_people()
