# -*- coding: utf-8 -*-

# Copyright (C) 2012-2018 Red Hat, Inc.
#
# This copyrighted material is made available to anyone wishing to use,
# modify, copy, or redistribute it subject to the terms and conditions of
# the GNU General Public License v.2, or (at your option) any later version.
# This program is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY expressed or implied, including the implied warranties of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU General
# Public License for more details.  You should have received a copy of the
# GNU General Public License along with this program; if not, write to the
# Free Software Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston, MA
# 02110-1301, USA.  Any Red Hat trademarks that are incorporated in the
# source code or documentation are not subject to the GNU General Public
# License and may only be used or replicated with the express permission of
# Red Hat, Inc.
#

import contextlib
import io
import json
import logging
import os
import sqlite3
import tempfile
import unittest
from unittest import mock

from swdb.db.item import RPMItem
from swdb.db.sqlite import SQLite3
from swdb.db.swdb import Swdb

import swdb.rpm
import swdb.util

logger = logging.getLogger('swdb')
skip = unittest.skip

NONEXISTENT_FILE = os.path.join(os.path.dirname(__file__), "non-existent-file")


class MockPackage(object):
    """Package as the package manager hands it over to the history."""

    def __init__(self, nevra, reponame=None):
        nevra_obj = swdb.rpm.split_nevra(nevra)
        self.name = nevra_obj.name
        self.epoch = nevra_obj.epoch
        self.version = nevra_obj.version
        self.release = nevra_obj.release
        self.arch = nevra_obj.arch
        self.reponame = reponame
        self._nevra = str(nevra_obj)

    def __str__(self):
        return self._nevra

    def __repr__(self):
        return "<MockPackage %s>" % self._nevra


class LegacyHistory(object):
    """A yum history database written the way yum wrote it."""

    _CREATE_OPS = ['''\
 CREATE TABLE trans_beg (
     tid INTEGER PRIMARY KEY,
     timestamp INTEGER NOT NULL, rpmdb_version TEXT NOT NULL,
     loginuid INTEGER);
''', '''\
 CREATE TABLE trans_end (
     tid INTEGER PRIMARY KEY REFERENCES trans_beg,
     timestamp INTEGER NOT NULL, rpmdb_version TEXT NOT NULL,
     return_code INTEGER NOT NULL);
''', '''\
 CREATE TABLE trans_with_pkgs (
     tid INTEGER NOT NULL REFERENCES trans_beg,
     pkgtupid INTEGER NOT NULL REFERENCES pkgtups);
''', '''\
 CREATE TABLE trans_error (
     mid INTEGER PRIMARY KEY,
     tid INTEGER NOT NULL REFERENCES trans_beg,
     msg TEXT NOT NULL);
''', '''\
 CREATE TABLE trans_script_stdout (
     lid INTEGER PRIMARY KEY,
     tid INTEGER NOT NULL REFERENCES trans_beg,
     line TEXT NOT NULL);
''', '''\
 CREATE TABLE trans_data_pkgs (
     tid INTEGER NOT NULL REFERENCES trans_beg,
     pkgtupid INTEGER NOT NULL REFERENCES pkgtups,
     done BOOL NOT NULL DEFAULT 'FALSE', state TEXT NOT NULL);
''', '''\
 CREATE TABLE pkgtups (
     pkgtupid INTEGER PRIMARY KEY,     name TEXT NOT NULL, arch TEXT NOT NULL,
     epoch TEXT NOT NULL, version TEXT NOT NULL, release TEXT NOT NULL,
     checksum TEXT);
''', '''\
 CREATE TABLE trans_cmdline (
     tid INTEGER NOT NULL REFERENCES trans_beg,
     cmdline TEXT NOT NULL);
''', '''\
 CREATE TABLE pkg_yumdb (
     pkgtupid INTEGER NOT NULL REFERENCES pkgtups,
     yumdb_key TEXT NOT NULL,
     yumdb_val TEXT NOT NULL);
''']

    def __init__(self, input_dir, date="2017-10-25"):
        history_dir = os.path.join(input_dir, "history")
        swdb.util.ensure_dir(history_dir)
        self.path = os.path.join(history_dir, "history-%s.sqlite" % date)
        self._conn = sqlite3.connect(self.path)
        for op in self._CREATE_OPS:
            self._conn.execute(op)

    def close(self):
        self._conn.commit()
        self._conn.close()

    def pkgtup(self, nevra, **yumdb):
        nevra_obj = swdb.rpm.split_nevra(nevra)
        cur = self._conn.execute(
            """INSERT INTO pkgtups (name, arch, epoch, version, release)
               VALUES (?, ?, ?, ?, ?)""",
            (nevra_obj.name, nevra_obj.arch, str(nevra_obj.epoch),
             nevra_obj.version, nevra_obj.release))
        pkgtupid = cur.lastrowid
        for key, value in sorted(yumdb.items()):
            self._conn.execute("INSERT INTO pkg_yumdb VALUES (?, ?, ?)",
                               (pkgtupid, key, value))
        return pkgtupid

    def trans(self, tid, timestamp, rpmdb_version, loginuid=1000, cmdline=None,
              end=True, return_code=0):
        self._conn.execute("INSERT INTO trans_beg VALUES (?, ?, ?, ?)",
                           (tid, timestamp, rpmdb_version, loginuid))
        if end:
            self._conn.execute("INSERT INTO trans_end VALUES (?, ?, ?, ?)",
                               (tid, timestamp + 1, rpmdb_version + "-end", return_code))
        if cmdline is not None:
            self._conn.execute("INSERT INTO trans_cmdline VALUES (?, ?)", (tid, cmdline))

    def trans_pkg(self, tid, pkgtupid, state, done='TRUE'):
        self._conn.execute(
            "INSERT INTO trans_data_pkgs (tid, pkgtupid, done, state) VALUES (?, ?, ?, ?)",
            (tid, pkgtupid, done, state))

    def trans_with(self, tid, pkgtupid):
        self._conn.execute("INSERT INTO trans_with_pkgs VALUES (?, ?)", (tid, pkgtupid))

    def stdout(self, tid, line):
        self._conn.execute("INSERT INTO trans_script_stdout (tid, line) VALUES (?, ?)",
                           (tid, line))

    def error(self, tid, msg):
        self._conn.execute("INSERT INTO trans_error (tid, msg) VALUES (?, ?)", (tid, msg))


def write_groups_json(input_dir, data):
    path = os.path.join(input_dir, "groups.json")
    with open(path, "w") as groups_file:
        if isinstance(data, str):
            groups_file.write(data)
        else:
            json.dump(data, groups_file)
    return path


class TestCase(unittest.TestCase):

    def assertEmpty(self, collection):
        return self.assertEqual(len(collection), 0)

    def assertFile(self, path):
        """Assert the given path is a file."""
        return self.assertTrue(os.path.isfile(path))

    def assertLength(self, collection, length):
        return self.assertEqual(len(collection), length)

    def assertPathDoesNotExist(self, path):
        return self.assertFalse(os.access(path, os.F_OK))


class SwdbTestCase(TestCase):
    """Facade over a fresh in-memory database."""

    def setUp(self):
        self.conn = SQLite3(":memory:")
        self.swdb = Swdb(self.conn)

    def tearDown(self):
        self.conn.close()

    def rpm(self, nevra):
        return RPMItem.from_nevra(self.conn, nevra)

    def add_trans(self, items, done=True, dt_begin=1, rpmdb_version="rpmdb"):
        """Record a transaction of (item, repoid, action, reason) tuples."""
        self.swdb.init_transaction()
        for item, repoid, action, reason in items:
            self.swdb.add_item(item, repoid, action, reason)
        self.swdb.begin_transaction(dt_begin, rpmdb_version, "", 0)
        return self.swdb.end_transaction(dt_begin + 1, rpmdb_version, done)


def mkdtemp():
    return tempfile.mkdtemp(prefix="swdb-test-")


@contextlib.contextmanager
def patch_std_streams():
    with mock.patch('sys.stdout', new_callable=io.StringIO) as stdout, \
            mock.patch('sys.stderr', new_callable=io.StringIO) as stderr:
        yield (stdout, stderr)


def drop_all_handlers():
    logger = logging.getLogger('swdb')
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
