#!/usr/bin/env python
import os
import sys


def main():
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "project_settings.settings")
    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable?"
        ) from exc

    if len(sys.argv) == 2 and sys.argv[1] == "runserver":
        from django.conf import settings

        sys.argv.append(f"0.0.0.0:{settings.PORT}")

    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
