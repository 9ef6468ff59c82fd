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

import glob
import json
import os
import sqlite3

from swdb.db.item import CompsEnvironmentItem, CompsGroupItem, RPMItem
from swdb.db.sqlite import SQLite3
from swdb.db.transaction import WritableTransaction
from swdb.db.types import (CompsPackageType, TransactionItemAction,
                           TransactionItemReason, convert_reason)
from swdb.i18n import _
from swdb.util import logger

import swdb.const
import swdb.db.schema
import swdb.exceptions
import swdb.logging
import swdb.util

# yum history package states
_STATE_ACTIONS = {
    'Install': TransactionItemAction.INSTALL,
    'True-Install': TransactionItemAction.INSTALL,
    'Dep-Install': TransactionItemAction.INSTALL,
    'Downgrade': TransactionItemAction.DOWNGRADE,
    'Downgraded': TransactionItemAction.DOWNGRADED,
    'Obsoleting': TransactionItemAction.OBSOLETE,
    'Obsoleted': TransactionItemAction.OBSOLETED,
    'Update': TransactionItemAction.UPGRADE,
    'Updated': TransactionItemAction.UPGRADED,
    'Erase': TransactionItemAction.REMOVE,
    'Reinstall': TransactionItemAction.REINSTALL,
    'Reinstalled': TransactionItemAction.REINSTALLED,
}

_STATE_REASONS = {
    'True-Install': TransactionItemReason.USER,
    'Dep-Install': TransactionItemReason.DEPENDENCY,
}


class TransformerTransaction(WritableTransaction):
    """Transaction inserted with the id it had in the legacy history."""

    def save(self):
        self._db_insert(keep_id=True)


class Transformer(object):
    """Converts yum history and groups.json into a new history database.

    The result is written next to output_file and renamed over it only when
    everything was converted.
    """

    def __init__(self, input_dir, output_file):
        # :api
        self.input_dir = input_dir
        self.output_file = output_file
        self._rpm_items = {}
        self._yumdb = {}

    @staticmethod
    def create_database(conn):
        swdb.db.schema.create_database(conn)

    def _history_path(self):
        history_dir = os.path.join(self.input_dir, swdb.const.HISTORY_DIR)
        found = glob.glob(os.path.join(history_dir, swdb.const.LEGACY_HISTORY_GLOB))
        if not found:
            raise swdb.exceptions.MigrationError(
                _("No history database found."), history_dir)
        # dated names, the newest sorts last
        return sorted(found)[-1]

    def transform(self):
        # :api
        history_path = self._history_path()
        tmp_output_file = self.output_file + swdb.const.TRANSFORM_SUFFIX
        swdb.util.silent_remove(tmp_output_file)
        logger.info(_("Transforming database. It may take a while..."))
        logger.debug("Reading legacy history from '%s'", history_path)
        timer = swdb.logging.Timer("transform")

        self._rpm_items = {}
        self._yumdb = {}
        history = None
        conn = None
        try:
            history = SQLite3(history_path)
            conn = SQLite3(tmp_output_file)
            with conn.transaction():
                self.create_database(conn)
                last_trans = None
                for trans in self._transform_trans(conn, history):
                    last_trans = trans
                self._transform_groups(conn, last_trans)
        except (sqlite3.Error, swdb.exceptions.Error, ValueError) as ex:
            if conn is not None:
                conn.close()
            swdb.util.silent_remove(tmp_output_file)
            if isinstance(ex, swdb.exceptions.MigrationError):
                raise
            raise swdb.exceptions.MigrationError(str(ex), history_path)
        finally:
            if history is not None:
                history.close()
            if conn is not None:
                conn.close()

        os.rename(tmp_output_file, self.output_file)
        timer()
        logger.info(_("Database transformed into '%s'."), self.output_file)

    def _transform_trans(self, conn, history):
        rows = history.select("""
            SELECT
                tb.tid AS tid,
                tb.timestamp AS dt_begin,
                tb.rpmdb_version AS rpmdb_version_begin,
                tb.loginuid AS loginuid,
                te.timestamp AS dt_end,
                te.rpmdb_version AS rpmdb_version_end,
                te.return_code AS return_code,
                tc.cmdline AS cmdline
            FROM
                trans_beg tb
            LEFT JOIN
                trans_end te USING (tid)
            LEFT JOIN
                trans_cmdline tc USING (tid)
            ORDER BY
                tb.tid
        """)
        for row in rows:
            trans = TransformerTransaction(conn)
            trans.id = _to_int(row['tid'], 'tid')
            trans.dt_begin = _to_int(row['dt_begin'], 'timestamp')
            trans.dt_end = _to_int(row['dt_end'], 'timestamp') if row['dt_end'] is not None else 0
            trans.rpmdb_version_begin = row['rpmdb_version_begin'] or ""
            trans.rpmdb_version_end = row['rpmdb_version_end'] or ""
            loginuid = row['loginuid']
            trans.user_id = _to_int(loginuid, 'loginuid') if loginuid is not None else 0
            trans.cmdline = row['cmdline'] or ""
            trans.done = row['return_code'] is not None and row['return_code'] == 0

            self._transform_rpm_items(conn, history, trans)
            self._transform_trans_with(conn, history, trans)
            trans.save()
            trans.save_items()
            self._transform_output(history, trans)
            logger.debug("Transaction %d transformed with %d items",
                         trans.id, len(trans.get_items()))
            yield trans

    def _get_yumdb(self, history, pkgtupid):
        data = self._yumdb.get(pkgtupid)
        if data is None:
            rows = history.select(
                "SELECT yumdb_key, yumdb_val FROM pkg_yumdb WHERE pkgtupid = ?", (pkgtupid,))
            data = self._yumdb[pkgtupid] = dict((row['yumdb_key'], row['yumdb_val'])
                                                for row in rows)
        return data

    def _get_rpm_item(self, conn, history, pkgtupid):
        item = self._rpm_items.get(pkgtupid)
        if item is not None:
            return item
        row = history.select_one(
            """SELECT name, arch, epoch, version, release FROM pkgtups
               WHERE pkgtupid = ?""", (pkgtupid,))
        if row is None:
            raise swdb.exceptions.MigrationError(
                _("Package %s referenced but not recorded.") % pkgtupid)
        item = RPMItem(conn)
        item.name = row['name']
        item.epoch = _to_int(row['epoch'] or 0, 'epoch')
        item.version = row['version']
        item.release = row['release']
        item.arch = row['arch']
        item.save()
        self._rpm_items[pkgtupid] = item
        return item

    def _transform_rpm_items(self, conn, history, trans):
        rows = history.select("""
            SELECT pkgtupid, done, state
            FROM trans_data_pkgs
            WHERE tid = ?
            ORDER BY rowid
        """, (trans.id,))
        for row in rows:
            state = row['state']
            action = _STATE_ACTIONS.get(state)
            if action is None:
                raise swdb.exceptions.MigrationError(
                    _("Unknown package state '%s' in transaction %d.") % (state, trans.id))
            item = self._get_rpm_item(conn, history, row['pkgtupid'])
            yumdb = self._get_yumdb(history, row['pkgtupid'])

            if 'reason' in yumdb:
                reason = convert_reason(yumdb['reason'])
            else:
                reason = _STATE_REASONS.get(state, TransactionItemReason.UNKNOWN)
            if not trans.releasever and yumdb.get('releasever'):
                trans.releasever = yumdb['releasever']

            ti = trans.add_item(item, yumdb.get('from_repo', ""), action, reason)
            ti.done = row['done'] in ('TRUE', 1, '1')

    def _transform_trans_with(self, conn, history, trans):
        rows = history.select(
            "SELECT pkgtupid FROM trans_with_pkgs WHERE tid = ? ORDER BY rowid", (trans.id,))
        for row in rows:
            trans.add_software_performed_with(
                self._get_rpm_item(conn, history, row['pkgtupid']))

    def _transform_output(self, history, trans):
        rows = history.select(
            "SELECT line FROM trans_script_stdout WHERE tid = ? ORDER BY lid", (trans.id,))
        for row in rows:
            trans.add_console_output_line(swdb.const.CONSOLE_STDOUT, row['line'])
        rows = history.select(
            "SELECT msg FROM trans_error WHERE tid = ? ORDER BY mid", (trans.id,))
        for row in rows:
            trans.add_console_output_line(swdb.const.CONSOLE_STDERR, row['msg'])

    def _transform_groups(self, conn, last_trans):
        groups_path = os.path.join(self.input_dir, swdb.const.LEGACY_GROUPS_FILE)
        if not os.path.isfile(groups_path):
            return
        try:
            with open(groups_path) as groups_file:
                root = json.load(groups_file)
        except (IOError, OSError, ValueError) as ex:
            raise swdb.exceptions.MigrationError(
                _("Unable to parse groups: %s") % ex, groups_path)
        if not isinstance(root, dict):
            raise swdb.exceptions.MigrationError(
                _("Unexpected group persistor format."), groups_path)

        trans = WritableTransaction(conn)
        if last_trans is not None:
            trans.dt_begin = trans.dt_end = last_trans.dt_end or last_trans.dt_begin
            trans.rpmdb_version_begin = last_trans.rpmdb_version_end
            trans.rpmdb_version_end = last_trans.rpmdb_version_end
            trans.releasever = last_trans.releasever

        for group_id, data in _json_section(root, 'GROUPS', groups_path):
            group = CompsGroupItem(conn)
            group.group_id = group_id
            self._fill_comps_item(group, data, groups_path)
            for name in _json_list(data, 'full_list', groups_path):
                group.add_package(name, True, CompsPackageType.MANDATORY)
            for name in _json_list(data, 'pkg_exclude', groups_path):
                group.add_package(name, False, CompsPackageType.MANDATORY)
            self._add_done_item(trans, group)

        for env_id, data in _json_section(root, 'ENVIRONMENTS', groups_path):
            env = CompsEnvironmentItem(conn)
            env.environment_id = env_id
            self._fill_comps_item(env, data, groups_path)
            for group_id in _json_list(data, 'full_list', groups_path):
                env.add_group(group_id, True, CompsPackageType.MANDATORY)
            for group_id in _json_list(data, 'pkg_exclude', groups_path):
                env.add_group(group_id, False, CompsPackageType.MANDATORY)
            self._add_done_item(trans, env)

        if not trans.get_items():
            return
        trans.begin()
        trans.finish(True)
        logger.debug("Groups recorded in transaction %d", trans.id)

    @staticmethod
    def _fill_comps_item(item, data, path):
        item.name = data.get('name') or ""
        item.translated_name = data.get('ui_name') or ""
        try:
            item.package_types = CompsPackageType(int(data.get('pkg_types', 0)))
        except (TypeError, ValueError):
            raise swdb.exceptions.MigrationError(
                _("Invalid package types of '%s'.") % item, path)

    @staticmethod
    def _add_done_item(trans, item):
        ti = trans.add_item(item, "", TransactionItemAction.INSTALL,
                            TransactionItemReason.USER)
        ti.done = True


def _to_int(value, name):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise swdb.exceptions.MigrationError(
            _("Invalid value of %s: %s") % (name, value))


def _json_section(root, key, path):
    section = root.get(key, {})
    if not isinstance(section, dict):
        raise swdb.exceptions.MigrationError(
            _("Unexpected format of '%s' section.") % key, path)
    for obj_id in sorted(section):
        data = section[obj_id]
        if not isinstance(data, dict):
            raise swdb.exceptions.MigrationError(
                _("Unexpected format of '%s'.") % obj_id, path)
        yield obj_id, data


def _json_list(data, key, path):
    values = data.get(key, [])
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise swdb.exceptions.MigrationError(
            _("Unexpected format of '%s' list.") % key, path)
    return values
