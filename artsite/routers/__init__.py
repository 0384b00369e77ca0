"""
FastAPI routers grouped by page section (pages, about, gallery/shop).

Each module exposes an APIRouter that app.py includes; shared request
plumbing lives in deps.py.
"""
