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
# Copyright 2017-2018 Red Hat, Inc.

"""
Core swdb Errors.
"""

from swdb.i18n import ucd


class Error(Exception):
    """Base Error. All other Errors thrown by swdb should inherit from this.

    :api

    """
    def __init__(self, value=None):
        super(Error, self).__init__()
        self.value = None if value is None else ucd(value)

    def __str__(self):
        return "%s" % (self.value,)


class ConfigError(Error):
    def __init__(self, value=None, raw_error=None):
        super(ConfigError, self).__init__(value)
        self.raw_error = ucd(raw_error) if raw_error is not None else None


class DatabaseError(Error):
    # :api
    pass


class MigrationError(Error):
    """Legacy history data could not be transformed.

    :api

    """
    def __init__(self, value=None, path=None):
        super(MigrationError, self).__init__(value)
        self.path = None if path is None else ucd(path)

    def __str__(self):
        if self.path:
            return "%s: %s" % (self.path, self.value)
        return super(MigrationError, self).__str__()


class UsageError(Error):
    """A precondition of a transaction lifecycle call was violated.

    Raised before anything is written to the database.

    :api

    """
    pass
