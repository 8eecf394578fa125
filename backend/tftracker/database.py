from databases import Database

from tftracker.config import config

database = Database(str(config.pg_dsn))
