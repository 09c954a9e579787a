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

# --- Constants ---
SAVE_FILE_EXTENSION = ".json"

# Bracket limits
MIN_PLAYERS = 8
MAX_PLAYERS = 32
PLAYERS_PER_MATCH = 4
SEMI_SEATS = 2 * PLAYERS_PER_MATCH
WINNER_COUNT = 3

# While the bracket holds this many tryouts or fewer, the top two of every
# tryout advance. Above it only the winner does.
DOUBLE_PROMOTION_MAX_TRYOUTS = 4

# Match lengths, in kills
MATCH_LENGTH = 10
FINAL_LENGTH = 20

# Minutes between matches
MATCH_PAUSE_MINUTES = 5

# Match kinds
TRYOUT = "tryout"
SEMI = "semi"
FINAL = "final"
MATCH_KINDS = (TRYOUT, SEMI, FINAL)

# Round commits
SELF_KILL = -1
SWEEP_KILLS = 3

# Score weights
SWEEP_SCORE = 5
SHOT_SCORE = 3
KILL_SCORE = 2
SELF_SCORE = 1
EXPLOSION_SCORE = 1

# Archer colors, in the order the game indexes them
COLORS = [
    "green",
    "blue",
    "pink",
    "orange",
    "white",
    "yellow",
    "cyan",
    "purple",
    "red",
]

# Userlevels. Spaced so that new ones can be inserted in between.
PERMISSION_PRODUCER = 100
PERMISSION_COMMENTATOR = 50
PERMISSION_JUDGE = 30
PERMISSION_PLAYER = 10

# Event kinds
EV_NEW_TOURNAMENT = "new_tournament"
EV_PLAYER_JOIN = "player_join"
EV_PLAYER_REMOVE = "player_remove"
EV_START = "start"
EV_RESHUFFLE = "reshuffle"
EV_BACKFILL_SEMI = "backfill_semi"
EV_TOURNAMENT_END = "tournament_end"
EV_MATCH_STARTED = "started"
EV_MATCH_ENDED = "ended"
EV_TIME_SET = "time_set"
EV_COLOR_CONFLICT = "color_conflict"
EV_RUNNERUPS = "runnerups"

# Broadcast topics
TOPIC_TOURNAMENT = "tournament"
TOPIC_ALL = "all"
TOPIC_GAME_MATCH = "match"

# Credits roll. These are static until they can be configured per tournament.
CREDITS_EXECUTIVE_ID = "1279099058796903"
CREDITS_PRODUCER_IDS = [
    "10153943465786915",
    "10154542569541289",
    "10153964695568099",
    "10153910124391516",
    "10154040229117471",
    "10154011729888111",
    "10154296655435218",
]

# Tournaments whose name does not start with this are considered test data
OFFICIAL_TOURNAMENT_PREFIX = "DrunkenFall"

# Game client defaults
DEFAULT_LEVEL = "twilight"
DEFAULT_RULESET = ""
