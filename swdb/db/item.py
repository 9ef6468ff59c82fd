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

import fnmatch

from swdb.db.transactionitem import TransactionItem
from swdb.db.types import CompsPackageType, ItemType
from swdb.i18n import _

import swdb.exceptions
import swdb.rpm


class Item(object):
    """Persisted installable unit. id 0 means the item was not saved yet."""

    item_type = ItemType.UNKNOWN

    def __init__(self, conn):
        self.conn = conn
        self.id = 0

    def __str__(self):
        return ""

    def save(self):
        if self.id == 0:
            self._db_insert()

    def _db_insert_item(self):
        self.conn.execute("INSERT INTO item (id, item_type) VALUES (null, ?)",
                          (int(self.item_type),))
        return self.conn.last_insert_row_id()

    def _db_insert(self):
        with self.conn.savepoint():
            item_id = self._db_insert_item()
        self.id = item_id


def _trans_items_from_rows(conn, rows, make_item):
    # transaction items of one query share the item objects they reference
    items = {}
    result = []
    for row in rows:
        item = items.get(row['item_id'])
        if item is None:
            item = items[row['item_id']] = make_item(row)
        result.append(TransactionItem.from_row(conn, row, item))
    return result


class RPMItem(Item):

    item_type = ItemType.RPM

    _TRANS_ITEM_SELECT = """
        SELECT
            ti.id, ti.trans_id, ti.action, ti.reason, ti.done, r.repoid,
            i.item_id, i.name, i.epoch, i.version, i.release, i.arch
        FROM
            trans_item ti
        JOIN
            repo r ON ti.repo_id = r.id
        JOIN
            rpm i USING (item_id)
    """

    def __init__(self, conn, pk=None):
        super(RPMItem, self).__init__(conn)
        self.name = ""
        self.epoch = 0
        self.version = ""
        self.release = ""
        self.arch = ""
        if pk is not None:
            self._db_select(pk)

    def __str__(self):
        return self.nevra

    def __repr__(self):
        return "<%s %s>" % (self.__class__.__name__, self.nevra)

    @property
    def evr(self):
        if self.epoch:
            return "%d:%s-%s" % (self.epoch, self.version, self.release)
        return "%s-%s" % (self.version, self.release)

    @property
    def nevra(self):
        return "%s-%s.%s" % (self.name, self.evr, self.arch)

    def save(self):
        if self.id == 0:
            self._db_select_or_insert()

    def _db_select(self, pk):
        row = self.conn.select_one(
            "SELECT name, epoch, version, release, arch FROM rpm WHERE item_id = ?", (pk,))
        if row is None:
            raise swdb.exceptions.DatabaseError(_("RPM item %d not found.") % pk)
        self._set_fields(row)
        self.id = pk

    def _set_fields(self, row):
        self.name = row['name']
        self.epoch = row['epoch']
        self.version = row['version']
        self.release = row['release']
        self.arch = row['arch']

    def _db_insert(self):
        # the id is assigned only once every row of the item is written
        with self.conn.savepoint():
            item_id = self._db_insert_item()
            self.conn.execute(
                """INSERT INTO rpm (item_id, name, epoch, version, release, arch)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (item_id, self.name, self.epoch, self.version, self.release, self.arch))
        self.id = item_id

    def _db_select_or_insert(self):
        row = self.conn.select_one(
            """SELECT item_id FROM rpm
               WHERE name = ? AND epoch = ? AND version = ? AND release = ? AND arch = ?""",
            (self.name, self.epoch, self.version, self.release, self.arch))
        if row is None:
            self._db_insert()
        else:
            self.id = row['item_id']

    @classmethod
    def _from_row(cls, conn, row):
        item = cls(conn)
        item._set_fields(row)
        item.id = row['item_id']
        return item

    @classmethod
    def from_nevra(cls, conn, nevra):
        """Return an unsaved item for a NEVRA string or None if it can't be parsed."""
        parsed = swdb.rpm.split_nevra(nevra)
        if parsed is None:
            return None
        item = cls(conn)
        item.name = parsed.name
        item.epoch = parsed.epoch
        item.version = parsed.version
        item.release = parsed.release
        item.arch = parsed.arch
        return item

    @classmethod
    def get_transaction_items(cls, conn, trans_id):
        rows = conn.select(cls._TRANS_ITEM_SELECT + """
            WHERE ti.trans_id = ?
            ORDER BY ti.id
        """, (trans_id,))
        return _trans_items_from_rows(conn, rows, lambda row: cls._from_row(conn, row))

    @classmethod
    def get_transaction_item(cls, conn, nevra):
        """Return the most recent transaction item of an exact NEVRA."""
        parsed = swdb.rpm.split_nevra(nevra)
        if parsed is None:
            return None
        rows = conn.select(cls._TRANS_ITEM_SELECT + """
            WHERE
                i.name = ?
                AND i.epoch = ?
                AND i.version = ?
                AND i.release = ?
                AND i.arch = ?
            ORDER BY ti.id DESC
            LIMIT 1
        """, (parsed.name, parsed.epoch, parsed.version, parsed.release, parsed.arch))
        result = _trans_items_from_rows(conn, rows, lambda row: cls._from_row(conn, row))
        return result[0] if result else None


class _CompsItem(Item):
    """Common part of groups and environments.

    Comps items are snapshots: every save of a new instance stores a new row
    together with its members.
    """

    _TABLE = None
    _ID_COLUMN = None
    _OBJ_ATTR = None

    def __init__(self, conn, pk=None):
        super(_CompsItem, self).__init__(conn)
        self.name = ""
        self.translated_name = ""
        self.package_types = CompsPackageType(0)
        self._members = None if pk is not None else []
        if pk is not None:
            self._db_select(pk)

    def __repr__(self):
        return "<%s %s>" % (self.__class__.__name__, self)

    @property
    def obj_id(self):
        """Group or environment id."""
        return getattr(self, self._OBJ_ATTR)

    @obj_id.setter
    def obj_id(self, value):
        setattr(self, self._OBJ_ATTR, value)

    def _load_members(self):
        raise NotImplementedError

    def _members_list(self):
        if self._members is None:
            self._members = self._load_members()
        return self._members

    def _db_select(self, pk):
        row = self.conn.select_one(
            "SELECT * FROM %s WHERE item_id = ?" % self._TABLE, (pk,))
        if row is None:
            raise swdb.exceptions.DatabaseError(
                _("Comps item %d not found.") % pk)
        self.id = pk
        self._set_fields(row)

    def _set_fields(self, row):
        self.obj_id = row[self._ID_COLUMN]
        self.name = row['name']
        self.translated_name = row['translated_name']
        self.package_types = CompsPackageType(row['pkg_types'])

    def _db_insert(self):
        members = self._members_list()
        with self.conn.savepoint():
            item_id = self._db_insert_item()
            self.conn.execute(
                "INSERT INTO %s (item_id, %s, name, translated_name, pkg_types) "
                "VALUES (?, ?, ?, ?, ?)" % (self._TABLE, self._ID_COLUMN),
                (item_id, self.obj_id, self.name, self.translated_name,
                 int(self.package_types)))
            member_ids = [member._db_insert(item_id) for member in members]
        self.id = item_id
        for member, member_id in zip(members, member_ids):
            member.id = member_id

    @classmethod
    def _from_row(cls, conn, row):
        item = cls(conn)
        item.id = row['item_id']
        item._members = None
        item._set_fields(row)
        return item

    @classmethod
    def _trans_item_select(cls):
        return """
            SELECT
                ti.id, ti.trans_id, ti.action, ti.reason, ti.done, r.repoid,
                i.item_id, i.%s, i.name, i.translated_name, i.pkg_types
            FROM
                trans_item ti
            JOIN
                repo r ON ti.repo_id = r.id
            JOIN
                %s i USING (item_id)
        """ % (cls._ID_COLUMN, cls._TABLE)

    @classmethod
    def get_transaction_items(cls, conn, trans_id):
        rows = conn.select(cls._trans_item_select() + """
            WHERE ti.trans_id = ?
            ORDER BY ti.id
        """, (trans_id,))
        return _trans_items_from_rows(conn, rows, lambda row: cls._from_row(conn, row))

    @classmethod
    def get_transaction_item(cls, conn, obj_id):
        """Return the most recent transaction item of a group or environment id."""
        rows = conn.select(cls._trans_item_select() + """
            WHERE i.%s = ?
            ORDER BY ti.id DESC
            LIMIT 1
        """ % cls._ID_COLUMN, (obj_id,))
        result = _trans_items_from_rows(conn, rows, lambda row: cls._from_row(conn, row))
        return result[0] if result else None

    @classmethod
    def get_transaction_items_by_pattern(cls, conn, pattern):
        """Latest transaction item of every id whose id or name matches pattern."""
        pattern = pattern.lower()
        rows = conn.select(
            "SELECT DISTINCT %s AS obj_id, name, translated_name FROM %s ORDER BY %s"
            % (cls._ID_COLUMN, cls._TABLE, cls._ID_COLUMN))
        matched = []
        for row in rows:
            if row['obj_id'] in matched:
                continue
            for value in (row['obj_id'], row['name'], row['translated_name']):
                if value and fnmatch.fnmatchcase(value.lower(), pattern):
                    matched.append(row['obj_id'])
                    break
        result = []
        for obj_id in matched:
            trans_item = cls.get_transaction_item(conn, obj_id)
            if trans_item is not None:
                result.append(trans_item)
        return result


class CompsGroupItem(_CompsItem):

    item_type = ItemType.GROUP

    _TABLE = 'comps_group'
    _ID_COLUMN = 'groupid'
    _OBJ_ATTR = 'group_id'

    def __init__(self, conn, pk=None):
        self.group_id = ""
        super(CompsGroupItem, self).__init__(conn, pk)

    def __str__(self):
        return self.group_id

    def _load_members(self):
        rows = self.conn.select(
            """SELECT id, name, installed, pkg_type FROM comps_group_package
               WHERE group_id = ? ORDER BY id""", (self.id,))
        result = []
        for row in rows:
            pkg = CompsGroupPackage(self, row['name'], bool(row['installed']),
                                    CompsPackageType(row['pkg_type']))
            pkg.id = row['id']
            result.append(pkg)
        return result

    def add_package(self, name, installed, package_type):
        for pkg in self._members_list():
            if pkg.name == name:
                pkg.installed = installed
                pkg.package_type = package_type
                return pkg
        pkg = CompsGroupPackage(self, name, installed, package_type)
        self._members.append(pkg)
        return pkg

    def get_packages(self):
        return list(self._members_list())


class CompsGroupPackage(object):

    def __init__(self, group, name, installed, package_type):
        self.group = group
        self.id = 0
        self.name = name
        self.installed = installed
        self.package_type = package_type

    def __repr__(self):
        return "<%s %s/%s>" % (self.__class__.__name__, self.group.group_id, self.name)

    def _db_insert(self, group_item_id):
        self.group.conn.execute(
            """INSERT INTO comps_group_package (group_id, name, installed, pkg_type)
               VALUES (?, ?, ?, ?)""",
            (group_item_id, self.name, int(self.installed), int(self.package_type)))
        return self.group.conn.last_insert_row_id()


class CompsEnvironmentItem(_CompsItem):

    item_type = ItemType.ENVIRONMENT

    _TABLE = 'comps_environment'
    _ID_COLUMN = 'environmentid'
    _OBJ_ATTR = 'environment_id'

    def __init__(self, conn, pk=None):
        self.environment_id = ""
        super(CompsEnvironmentItem, self).__init__(conn, pk)

    def __str__(self):
        return self.environment_id

    def _load_members(self):
        rows = self.conn.select(
            """SELECT id, groupid, installed, group_type FROM comps_environment_group
               WHERE environment_id = ? ORDER BY id""", (self.id,))
        result = []
        for row in rows:
            group = CompsEnvironmentGroup(self, row['groupid'], bool(row['installed']),
                                          CompsPackageType(row['group_type']))
            group.id = row['id']
            result.append(group)
        return result

    def add_group(self, group_id, installed, group_type):
        for group in self._members_list():
            if group.group_id == group_id:
                group.installed = installed
                group.group_type = group_type
                return group
        group = CompsEnvironmentGroup(self, group_id, installed, group_type)
        self._members.append(group)
        return group

    def get_groups(self):
        return list(self._members_list())


class CompsEnvironmentGroup(object):

    def __init__(self, environment, group_id, installed, group_type):
        self.environment = environment
        self.id = 0
        self.group_id = group_id
        self.installed = installed
        self.group_type = group_type

    def __repr__(self):
        return "<%s %s/%s>" % (self.__class__.__name__, self.environment.environment_id,
                               self.group_id)

    def _db_insert(self, environment_item_id):
        self.environment.conn.execute(
            """INSERT INTO comps_environment_group (environment_id, groupid, installed, group_type)
               VALUES (?, ?, ?, ?)""",
            (environment_item_id, self.group_id, int(self.installed), int(self.group_type)))
        return self.environment.conn.last_insert_row_id()
