from __future__ import annotations

from flask import Flask, jsonify

from ..web.auth import teacher_required
from ..web.responses import api_errors, json_body, json_ok
from .service import product_view


def register(app: Flask, container) -> None:
    service = container.product_service

    @app.route("/api/products", methods=["GET"], endpoint="api_products")
    @api_errors("Failed to fetch products")
    def list_products():
        return json_ok([product_view(p) for p in service.list_products()])

    @app.route("/api/products", methods=["POST"], endpoint="api_create_product")
    @api_errors("Failed to create product")
    @teacher_required
    def create_product():
        return json_ok(product_view(service.create_product(json_body())), 201)

    @app.route("/api/products/<product_ref>", methods=["GET"], endpoint="api_product")
    @api_errors("Failed to fetch product")
    def get_product(product_ref: str):
        return json_ok(product_view(service.get_product(product_ref)))

    @app.route("/api/products/<product_ref>", methods=["PUT"], endpoint="api_update_product")
    @api_errors("Failed to update product")
    @teacher_required
    def update_product(product_ref: str):
        return json_ok(product_view(service.update_product(product_ref, json_body())))

    @app.route("/api/products/<product_ref>", methods=["DELETE"], endpoint="api_delete_product")
    @api_errors("Failed to delete product")
    @teacher_required
    def delete_product(product_ref: str):
        service.delete_product(product_ref)
        return jsonify({"message": "Product deleted successfully"})
