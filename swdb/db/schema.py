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

import swdb.const

_CREATE_OPS = ['''\
 CREATE TABLE trans (
     id INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
     dt_begin INTEGER NOT NULL,
     dt_end INTEGER,
     rpmdb_version_begin TEXT,
     rpmdb_version_end TEXT,
     releasever TEXT NOT NULL,
     user_id INTEGER NOT NULL,
     cmdline TEXT,
     done INTEGER NOT NULL DEFAULT 0);
''', '''\
 CREATE TABLE repo (
     id INTEGER PRIMARY KEY,
     repoid TEXT NOT NULL,
     CONSTRAINT repo_unique_repoid UNIQUE (repoid));
''', '''\
 CREATE TABLE item (
     id INTEGER PRIMARY KEY,
     item_type INTEGER NOT NULL);
''', '''\
 CREATE TABLE trans_item (
     id INTEGER PRIMARY KEY,
     trans_id INTEGER REFERENCES trans(id),
     item_id INTEGER REFERENCES item(id),
     repo_id INTEGER REFERENCES repo(id),
     action INTEGER NOT NULL,
     reason INTEGER NOT NULL,
     done INTEGER NOT NULL DEFAULT 0);
''', '''\
 CREATE TABLE item_replaced_by (
     trans_item_id INTEGER REFERENCES trans_item(id),
     by_trans_item_id INTEGER REFERENCES trans_item(id),
     PRIMARY KEY (trans_item_id, by_trans_item_id));
''', '''\
 CREATE TABLE trans_with (
     id INTEGER PRIMARY KEY,
     trans_id INTEGER REFERENCES trans(id),
     item_id INTEGER REFERENCES item(id),
     CONSTRAINT trans_with_unique_trans_item UNIQUE (trans_id, item_id));
''', '''\
 CREATE TABLE rpm (
     item_id INTEGER PRIMARY KEY REFERENCES item(id),
     name TEXT NOT NULL,
     epoch INTEGER NOT NULL,
     version TEXT NOT NULL,
     release TEXT NOT NULL,
     arch TEXT NOT NULL,
     CONSTRAINT rpm_unique_nevra UNIQUE (name, epoch, version, release, arch));
''', '''\
 CREATE TABLE comps_group (
     item_id INTEGER PRIMARY KEY REFERENCES item(id),
     groupid TEXT NOT NULL,
     name TEXT NOT NULL,
     translated_name TEXT NOT NULL,
     pkg_types INTEGER NOT NULL);
''', '''\
 CREATE TABLE comps_group_package (
     id INTEGER PRIMARY KEY,
     group_id INTEGER NOT NULL REFERENCES comps_group(item_id),
     name TEXT NOT NULL,
     installed INTEGER NOT NULL,
     pkg_type INTEGER NOT NULL,
     CONSTRAINT comps_group_package_unique_name UNIQUE (group_id, name));
''', '''\
 CREATE TABLE comps_environment (
     item_id INTEGER PRIMARY KEY REFERENCES item(id),
     environmentid TEXT NOT NULL,
     name TEXT NOT NULL,
     translated_name TEXT NOT NULL,
     pkg_types INTEGER NOT NULL);
''', '''\
 CREATE TABLE comps_environment_group (
     id INTEGER PRIMARY KEY,
     environment_id INTEGER NOT NULL REFERENCES comps_environment(item_id),
     groupid TEXT NOT NULL,
     installed INTEGER NOT NULL,
     group_type INTEGER NOT NULL,
     CONSTRAINT comps_environment_group_unique_groupid UNIQUE (environment_id, groupid));
''', '''\
 CREATE TABLE console_output (
     id INTEGER PRIMARY KEY,
     trans_id INTEGER REFERENCES trans(id),
     file_descriptor INTEGER NOT NULL,
     line TEXT NOT NULL);
''', '''\
 CREATE TABLE config (
     key TEXT PRIMARY KEY,
     value TEXT NOT NULL);
''', '''\
 CREATE INDEX trans_item_trans_id ON trans_item(trans_id);
''', '''\
 CREATE INDEX trans_item_item_id ON trans_item(item_id);
''']


def create_database(conn):
    """Create the history tables on an empty database."""
    for op in _CREATE_OPS:
        conn.execute(op)
    conn.execute("INSERT INTO config VALUES (?, ?)",
                 ('version', swdb.const.SCHEMA_VERSION))


def get_schema_version(conn):
    if not conn.table_exists('config'):
        return None
    row = conn.select_one("SELECT value FROM config WHERE key = 'version'")
    return row['value'] if row else None
