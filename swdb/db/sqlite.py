# -*- coding: utf-8 -*-

# Copyright (C) 2017-2018 Red Hat, Inc.
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

import contextlib
import os
import sqlite3

from swdb.i18n import _
from swdb.util import logger

import swdb.exceptions
import swdb.logging


class SQLite3(object):
    """Storage handle shared by all persisted objects of one database."""

    def __init__(self, path):
        self.path = path
        self._conn = None
        self.open()

    def __del__(self):
        self.close()

    @property
    def is_open(self):
        return self._conn is not None

    def open(self):
        if self._conn is not None:
            return
        if self.path != ':memory:':
            dirname = os.path.dirname(self.path)
            if dirname and not os.path.isdir(dirname):
                raise swdb.exceptions.DatabaseError(
                    _("Directory '%s' does not exist.") % dirname)
        logger.log(swdb.logging.DDEBUG, "Opening database '%s'", self.path)
        # statements run in autocommit mode unless wrapped in transaction()
        self._conn = sqlite3.connect(self.path, isolation_level=None)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")

    def close(self):
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def execute(self, sql, params=()):
        """Run one statement and return the cursor with its result rows."""
        return self._conn.execute(sql, params)

    def select(self, sql, params=()):
        return self._conn.execute(sql, params).fetchall()

    def select_one(self, sql, params=()):
        return self._conn.execute(sql, params).fetchone()

    def last_insert_row_id(self):
        return self._conn.execute("SELECT last_insert_rowid()").fetchone()[0]

    @contextlib.contextmanager
    def transaction(self):
        """Group the statements of the block, rolled back on any exception."""
        self._conn.execute("BEGIN")
        try:
            yield self
        except BaseException:
            self._conn.execute("ROLLBACK")
            raise
        self._conn.execute("COMMIT")

    @contextlib.contextmanager
    def savepoint(self, name="swdb"):
        """Like transaction() but may be nested in one."""
        self._conn.execute("SAVEPOINT %s" % name)
        try:
            yield self
        except BaseException:
            self._conn.execute("ROLLBACK TO %s" % name)
            self._conn.execute("RELEASE %s" % name)
            raise
        self._conn.execute("RELEASE %s" % name)

    def table_exists(self, name):
        row = self.select_one(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?", (name,))
        return row is not None
