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

import sqlite3

from swdb.db.item import CompsEnvironmentItem, CompsGroupItem, RPMItem
from swdb.db.reason import ReasonResolver
from swdb.db.sqlite import SQLite3
from swdb.db.transaction import Transaction, WritableTransaction
from swdb.db.types import SUPERSEDED_ACTIONS, TransactionItemAction
from swdb.i18n import _
from swdb.util import logger

import swdb.const
import swdb.db.schema
import swdb.exceptions
import swdb.util

_SUPERSEDED = ", ".join(str(int(action)) for action in SUPERSEDED_ACTIONS)

_SEARCH_RPM_SQL = """
    SELECT DISTINCT
        ti.trans_id
    FROM
        trans_item ti
    JOIN
        rpm i USING (item_id)
    WHERE
        i.name GLOB ?
        OR i.name || '.' || i.arch GLOB ?
        OR i.name || '-' || i.version GLOB ?
        OR i.name || '-' || i.version || '-' || i.release GLOB ?
        OR i.name || '-' || i.version || '-' || i.release || '.' || i.arch GLOB ?
        OR i.name || '-' || i.epoch || ':' || i.version || '-' || i.release || '.' || i.arch GLOB ?
        OR i.epoch || ':' || i.name || '-' || i.version || '-' || i.release || '.' || i.arch GLOB ?
"""


class Swdb(object):
    """Access to the software database.

    At most one transaction is in progress per instance, everything else is
    a read of the recorded history.
    """

    default_database_name = swdb.const.HISTORY_DB_NAME

    def __init__(self, conn):
        # :api
        try:
            if not isinstance(conn, SQLite3):
                conn = SQLite3(conn)
            self.conn = conn
            if not conn.table_exists('trans'):
                self.create_database()
        except sqlite3.Error as ex:
            raise swdb.exceptions.DatabaseError(
                _("Can't open history database: %s") % ex)
        self._transaction = None
        self._resolver = ReasonResolver(self.conn)

    @property
    def path(self):
        return self.conn.path

    def create_database(self):
        logger.debug("Creating history database '%s'", self.conn.path)
        with self.conn.transaction():
            swdb.db.schema.create_database(self.conn)

    def reset_database(self):
        self.close_transaction()
        self.conn.close()
        if self.conn.path != ':memory:':
            swdb.util.silent_remove(self.conn.path)
        self.conn.open()
        self.create_database()

    def close_database(self):
        self.conn.close()

    def close_transaction(self):
        self._transaction = None

    def _in_progress(self):
        if self._transaction is None:
            raise swdb.exceptions.UsageError(_("Not in progress"))
        return self._transaction

    def init_transaction(self):
        # :api
        if self._transaction is not None:
            raise swdb.exceptions.UsageError(_("In progress"))
        self._transaction = WritableTransaction(self.conn)

    def begin_transaction(self, dt_begin, rpmdb_version_begin, cmdline, user_id):
        # :api
        trans = self._in_progress()
        trans.dt_begin = dt_begin
        trans.rpmdb_version_begin = rpmdb_version_begin
        trans.cmdline = cmdline
        trans.user_id = user_id
        trans.begin()
        logger.debug("Transaction %d begun", trans.id)
        return trans.id

    def end_transaction(self, dt_end, rpmdb_version_end, done):
        # :api
        trans = self._in_progress()
        trans.dt_end = dt_end
        trans.rpmdb_version_end = rpmdb_version_end
        trans.finish(done)
        self._transaction = None
        return trans.id

    def set_releasever(self, releasever):
        self._in_progress().releasever = releasever

    def add_item(self, item, repoid, action, reason):
        # :api
        return self._in_progress().add_item(item, repoid, action, reason)

    def add_console_output_line(self, file_descriptor, line):
        self._in_progress().add_console_output_line(file_descriptor, line)

    def add_software_performed_with(self, software):
        self._in_progress().add_software_performed_with(software)

    def set_item_done(self, trans_item):
        trans_item.done = True
        if trans_item.id:
            self.conn.execute("UPDATE trans_item SET done = 1 WHERE id = ?", (trans_item.id,))

    def get_current(self):
        return self._transaction

    def get_items(self):
        if self._transaction is None:
            return []
        return self._transaction.get_items()

    def resolve_rpm_transaction_item_reason(self, name, arch, max_transaction_id=-1):
        # :api
        return self._resolver.resolve(name, arch, max_transaction_id, self._transaction)

    def get_last_transaction(self):
        row = self.conn.select_one("SELECT id FROM trans ORDER BY id DESC LIMIT 1")
        if row is None:
            return None
        return Transaction(self.conn, row['id'])

    def list_transactions(self):
        rows = self.conn.select("SELECT id FROM trans ORDER BY id")
        return [Transaction(self.conn, row['id']) for row in rows]

    def get_rpm_repo(self, nevra):
        ti = RPMItem.get_transaction_item(self.conn, nevra)
        if ti is None:
            return ""
        return ti.repoid

    def get_rpm_transaction_item(self, nevra):
        return RPMItem.get_transaction_item(self.conn, nevra)

    def get_comps_group_item(self, group_id):
        return CompsGroupItem.get_transaction_item(self.conn, group_id)

    def get_comps_group_items_by_pattern(self, pattern):
        return CompsGroupItem.get_transaction_items_by_pattern(self.conn, pattern)

    def get_comps_environment_item(self, env_id):
        return CompsEnvironmentItem.get_transaction_item(self.conn, env_id)

    def get_comps_environment_items_by_pattern(self, pattern):
        return CompsEnvironmentItem.get_transaction_items_by_pattern(self.conn, pattern)

    def _latest_done(self, table, id_column, obj_id):
        row = self.conn.select_one("""
            SELECT
                ti.action AS action,
                ti.item_id AS item_id
            FROM
                trans_item ti
            JOIN
                %s i USING (item_id)
            JOIN
                trans t ON ti.trans_id = t.id
            WHERE
                t.done = 1
                AND ti.action NOT IN (%s)
                AND i.%s = ?
            ORDER BY
                ti.trans_id DESC,
                ti.id DESC
            LIMIT 1
        """ % (table, _SUPERSEDED, id_column), (obj_id,))
        if row is None or row['action'] == TransactionItemAction.REMOVE:
            return None
        return row['item_id']

    def get_package_comps_groups(self, package_name):
        """Ids of installed groups whose latest record installs package_name."""
        rows = self.conn.select("""
            SELECT DISTINCT
                g.groupid
            FROM
                comps_group g
            JOIN
                comps_group_package p ON p.group_id = g.item_id
            WHERE
                p.name = ?
                AND p.installed = 1
            ORDER BY
                g.groupid
        """, (package_name,))
        result = []
        for row in rows:
            item_id = self._latest_done('comps_group', 'groupid', row['groupid'])
            if item_id is None:
                continue
            member = self.conn.select_one(
                """SELECT id FROM comps_group_package
                   WHERE group_id = ? AND name = ? AND installed = 1""",
                (item_id, package_name))
            if member is not None:
                result.append(row['groupid'])
        return result

    def get_comps_group_environments(self, group_id):
        """Ids of installed environments whose latest record installs group_id."""
        rows = self.conn.select("""
            SELECT DISTINCT
                e.environmentid
            FROM
                comps_environment e
            JOIN
                comps_environment_group g ON g.environment_id = e.item_id
            WHERE
                g.groupid = ?
                AND g.installed = 1
            ORDER BY
                e.environmentid
        """, (group_id,))
        result = []
        for row in rows:
            item_id = self._latest_done('comps_environment', 'environmentid',
                                        row['environmentid'])
            if item_id is None:
                continue
            member = self.conn.select_one(
                """SELECT id FROM comps_environment_group
                   WHERE environment_id = ? AND groupid = ? AND installed = 1""",
                (item_id, group_id))
            if member is not None:
                result.append(row['environmentid'])
        return result

    def search_transactions_by_rpm(self, patterns):
        """Ids of transactions with a package matching any of the patterns."""
        result = set()
        for pattern in patterns:
            rows = self.conn.select(_SEARCH_RPM_SQL, (pattern,) * 7)
            result.update(row['trans_id'] for row in rows)
        return sorted(result)

    def create_rpm_item(self):
        return RPMItem(self.conn)

    def create_comps_group_item(self):
        return CompsGroupItem(self.conn)

    def create_comps_environment_item(self):
        return CompsEnvironmentItem(self.conn)
