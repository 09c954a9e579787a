"""Exceptions for use in Drunkenfall"""

# Drunkenfall
# Copyright (C) 2025  Drunkenfall developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.


# ========== Base Application Exception ==========


class DrunkenfallException(Exception):
    """Base exception for all Drunkenfall errors.

    All custom exceptions in the application should inherit from this class.
    This enables catching all application-specific errors with a single except clause.
    """

    pass


# ========== Match Exceptions ==========


class MatchException(DrunkenfallException):
    """Base exception for match-related errors."""

    pass


class MatchAlreadyStartedException(MatchException):
    """Raised when starting a match that has already been started."""

    pass


class MatchAlreadyEndedException(MatchException):
    """Raised when ending a match that has already been ended."""

    pass


class MatchFullException(MatchException):
    """Raised when adding a fifth player to a match."""

    pass


class MatchNotFoundException(MatchException):
    """Raised when a requested match does not exist in the tournament."""

    pass


class InvalidRoundException(MatchException):
    """Raised when a round does not have one kill slot per shot slot."""

    pass


class ColorConflictException(MatchException):
    """Raised when there is no free color left to resolve a conflict with."""

    pass


# ========== Tournament Exceptions ==========


class TournamentException(DrunkenfallException):
    """Base exception for tournament-related errors."""

    pass


class TournamentStateException(TournamentException):
    """Raised when tournament is in an invalid state for the requested operation."""

    pass


class TournamentFullException(TournamentException):
    """Raised when the tournament already holds the maximum amount of players."""

    pass


class AlreadyJoinedException(TournamentException):
    """Raised when attempting to add a player that already exists."""

    pass


class InvalidPlayerCountException(TournamentException):
    """Raised when starting a tournament with too few or too many players."""

    pass


class BackfillCountException(TournamentException):
    """Raised when the backfill list does not match the open semi seats."""

    pass


class InvalidBackfillException(TournamentException):
    """Raised when backfilling a person twice or someone who already has a seat."""

    pass


class NotFinalMatchException(TournamentException):
    """Raised when awarding medals from any match other than the final."""

    pass


# ========== Player Exceptions ==========


class PlayerException(DrunkenfallException):
    """Base exception for player-related errors."""

    pass


class PlayerNotFoundException(PlayerException):
    """Raised when a person has no player object in the tournament."""

    pass


class PersonNotFoundException(PlayerException):
    """Raised when a requested person cannot be found."""

    pass


# ========== File/Resource Exceptions ==========


class ResourceException(DrunkenfallException):
    """Base exception for resource-related errors."""

    pass


class PersistenceException(ResourceException):
    """Raised when state cannot be written to or read from the store."""

    pass


# ========== Configuration Exceptions ==========


class ConfigurationException(DrunkenfallException):
    """Base exception for configuration errors."""

    pass


class InvalidConfigurationException(ConfigurationException):
    """Raised when configuration data is invalid."""

    pass
