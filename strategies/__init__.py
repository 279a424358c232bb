"""Agent policies for President."""

from strategies.base import FunctionStrategy, Strategy, as_strategy
from strategies.factory import create_strategy, list_strategies
from strategies.lowest_group import LowestGroupStrategy
from strategies.random_strategy import RandomStrategy
from strategies.weakest import WeakestCardStrategy, weakest_card

__all__ = [
    "Strategy",
    "FunctionStrategy",
    "as_strategy",
    "WeakestCardStrategy",
    "weakest_card",
    "LowestGroupStrategy",
    "RandomStrategy",
    "create_strategy",
    "list_strategies",
]
