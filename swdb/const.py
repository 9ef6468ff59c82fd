# const.py
# swdb constants.
#
# Copyright (C) 2017-2018 Red Hat, Inc.
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

CONF_FILENAME = '/etc/dnf/swdb.conf'  # :api
PERSISTDIR = '/var/lib/dnf'  # :api
LOGDIR = '/var/log'

HISTORY_DIR = 'history'
HISTORY_DB_NAME = 'history.sqlite'  # :api
# legacy yum history databases are named history-YYYY-MM-DD.sqlite
LEGACY_HISTORY_GLOB = 'history-*-*-*.sqlite'
LEGACY_GROUPS_FILE = 'groups.json'
TRANSFORM_SUFFIX = '.transform'

LOG = 'swdb.log'
LOG_MARKER = '--- logging initialized ---'
LOG_SIZE = 1024 * 1024
LOG_ROTATE = 4

# file descriptors of stored console output lines
CONSOLE_STDOUT = 1
CONSOLE_STDERR = 2

# schema version stored in the config table of every new database
SCHEMA_VERSION = '1.1'

VERSION = '0.1.0'
