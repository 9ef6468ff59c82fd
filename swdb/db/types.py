# -*- coding: utf-8 -*-

# Copyright (C) 2017-2018 Red Hat, Inc.
# Unified software database types
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Library General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program; if not, write to the Free Software
# Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston, MA 02110-1301 USA.
#

import enum


class ItemType(enum.IntEnum):
    UNKNOWN = 0
    RPM = 1
    GROUP = 2
    ENVIRONMENT = 3


# The numbers are stored in the database, never renumber them.
# DOWNGRADED, OBSOLETED and UPGRADED (3, 5, 7) mark items superseded
# within a transaction.
class TransactionItemAction(enum.IntEnum):
    INSTALL = 1
    DOWNGRADE = 2
    DOWNGRADED = 3
    OBSOLETE = 4
    OBSOLETED = 5
    UPGRADE = 6
    UPGRADED = 7
    REMOVE = 8
    REINSTALL = 9
    REINSTALLED = 10
    REASON_CHANGE = 11


class TransactionItemReason(enum.IntEnum):
    UNKNOWN = 0
    CLEAN = 1
    WEAK_DEPENDENCY = 2
    DEPENDENCY = 3
    GROUP = 4
    USER = 5


class CompsPackageType(enum.IntFlag):
    CONDITIONAL = 1
    DEFAULT = 2
    MANDATORY = 4
    OPTIONAL = 8


SUPERSEDED_ACTIONS = (
    TransactionItemAction.DOWNGRADED,
    TransactionItemAction.OBSOLETED,
    TransactionItemAction.UPGRADED,
)

# packages that appeared on the system
FORWARD_ACTIONS = [
    TransactionItemAction.INSTALL,
    TransactionItemAction.DOWNGRADE,
    TransactionItemAction.OBSOLETE,
    TransactionItemAction.UPGRADE,
    TransactionItemAction.REINSTALL,
]

# packages that got removed from the system
BACKWARD_ACTIONS = [
    TransactionItemAction.DOWNGRADED,
    TransactionItemAction.OBSOLETED,
    TransactionItemAction.UPGRADED,
    TransactionItemAction.REMOVE,
]

REASON_PRIORITIES = {
    TransactionItemReason.UNKNOWN: 0,
    TransactionItemReason.CLEAN: 1,
    TransactionItemReason.WEAK_DEPENDENCY: 2,
    TransactionItemReason.DEPENDENCY: 3,
    TransactionItemReason.GROUP: 4,
    TransactionItemReason.USER: 5,
}

_ACTION_NAMES = {
    TransactionItemAction.INSTALL: ('Install', 'I'),
    TransactionItemAction.DOWNGRADE: ('Downgrade', 'D'),
    TransactionItemAction.DOWNGRADED: ('Downgraded', 'D'),
    TransactionItemAction.OBSOLETE: ('Obsolete', 'O'),
    TransactionItemAction.OBSOLETED: ('Obsoleted', 'O'),
    TransactionItemAction.UPGRADE: ('Upgrade', 'U'),
    TransactionItemAction.UPGRADED: ('Upgraded', 'U'),
    TransactionItemAction.REMOVE: ('Removed', 'E'),
    TransactionItemAction.REINSTALL: ('Reinstall', 'R'),
    TransactionItemAction.REINSTALLED: ('Reinstalled', 'R'),
    TransactionItemAction.REASON_CHANGE: ('Reason Change', 'C'),
}

# reason strings used by yumdb and the command line
_REASON_NAMES = {
    TransactionItemReason.UNKNOWN: 'unknown',
    TransactionItemReason.CLEAN: 'clean',
    TransactionItemReason.WEAK_DEPENDENCY: 'weak-dependency',
    TransactionItemReason.DEPENDENCY: 'dependency',
    TransactionItemReason.GROUP: 'group',
    TransactionItemReason.USER: 'user',
}

_REASON_ALIASES = {
    'dep': TransactionItemReason.DEPENDENCY,
    'weak': TransactionItemReason.WEAK_DEPENDENCY,
}


def action_name(action):
    return _ACTION_NAMES[TransactionItemAction(action)][0]


def action_short(action):
    return _ACTION_NAMES[TransactionItemAction(action)][1]


def reason_to_string(reason):
    return _REASON_NAMES[TransactionItemReason(reason)]


def convert_reason(reason):
    """Return TransactionItemReason for a reason, its code or its name.

    Unrecognized names map to UNKNOWN.
    """
    if isinstance(reason, TransactionItemReason):
        return reason
    if isinstance(reason, int):
        return TransactionItemReason(reason)
    reason = reason.strip().lower()
    if reason in _REASON_ALIASES:
        return _REASON_ALIASES[reason]
    for value, name in _REASON_NAMES.items():
        if name == reason:
            return value
    return TransactionItemReason.UNKNOWN


def reason_priority(reason):
    return REASON_PRIORITIES[TransactionItemReason(reason)]
