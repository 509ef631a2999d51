# ==============================================
# Schemaless Dataset Query Engine
# ==============================================
#
# Package Structure (3 Topics + Facade):
#
# dataset_engine/
# ├── documents/        # Topic 1: Value kinds, field access, dataset names
# ├── analysis/         # Topic 2: Group / sort / stats over documents
# ├── storage/          # Topic 3: Record stores (memory, file, MongoDB, MySQL)
# ├── config.py         # Configuration management
# ├── errors.py         # ValidationError / StoreError taxonomy
# ├── dataset_query.py  # Facade: the single entry point
# ├── gateway.py        # Response shaping and error → status mapping
# └── cli.py            # Command line entry point
#
# ==============================================

__version__ = "0.1.0"
