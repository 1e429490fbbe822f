raise RuntimeError("entity module that fails on import")
