""" Entry point: migrate an S3 bucket into a B2 bucket """
import asyncio
import sys

from bucket_migrator.core.migrator import BucketMigrator
from bucket_migrator.errors import ConfigurationError


def main() -> int:
    try:
        migrator = BucketMigrator()
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    asyncio.run(migrator.run())
    return 0


if __name__ == "__main__":
    sys.exit(main())
