# cli.py

"""
Точка входа для запуска SpeedScout из корня репозитория без установки пакета.

Пример запуска:
    python cli.py --config configs/default.yaml run --format json --format html
"""
from speed_scout.cli import cli

if __name__ == "__main__":
    cli()
