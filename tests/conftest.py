import os
import tempfile

# banco em memória e caches temporários antes de importar a aplicação
_TMP_ROOT = tempfile.mkdtemp(prefix="showerconfig-tests-")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("IMAGE_CACHE_DIR", os.path.join(_TMP_ROOT, "images"))
os.environ.setdefault("LOCAL_STORAGE_ROOT", os.path.join(_TMP_ROOT, "storage"))
os.environ.setdefault("STORAGE_BACKEND", "local")
