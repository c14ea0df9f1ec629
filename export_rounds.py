from pathlib import Path

from handicap_tracker import config
from handicap_tracker.backup import write_backup
from handicap_tracker.db import SessionLocal
from handicap_tracker.store import PersistenceError, SqlRoundStore

# Paths
BACKUP_DIR = Path(config.BACKUP_DIR)

# Copia de todas las vueltas a CSV (mismas columnas que la hoja)
try:
    rounds = SqlRoundStore(SessionLocal).list_all()
except PersistenceError as e:
    print(f"❌ No se pudo leer la base de datos: {e.__cause__}")
    raise SystemExit(1)

if rounds:
    backup_file = write_backup(rounds, BACKUP_DIR)
    print(f"✅ Backup creado: {backup_file.name} ({len(rounds)} vueltas)")
else:
    print("❌ No hay vueltas que exportar")
