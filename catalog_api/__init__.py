"""Product catalog backend.

FastAPI service exposing CRUD and sub-resource operations over
Product entities:
- GET/POST /products
- GET/PUT/DELETE /products/{id}
- POST/DELETE /products/{id}/images
- PATCH /products/{id}/quantity
"""

__version__ = "0.1.0"
