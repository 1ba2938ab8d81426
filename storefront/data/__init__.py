"""Product data: schemas, the mock catalogue and the snapshot database."""
