from __future__ import annotations

from omnirest.catalog.entity_catalog import EntityCatalog, entity
from omnirest.catalog.models import PagingConfig

# Collections are wrapped in {"data": [...]}; single-item routes return the bare object.
OPENCART = EntityCatalog(
    "opencart",
    [
        ("store", entity("")),

        ("categories", entity("categories", "data")),
        ("category", entity("categories/{category_id}", required=["category_id"])),

        ("products", entity("products", "data", item_template="products/{product_id}", writable=True)),
        ("product", entity("products/{product_id}", required=["product_id"])),
        ("product_images", entity("products/{product_id}/images", "data", ["product_id"])),
        ("product_options", entity("products/{product_id}/options", "data", ["product_id"])),
        ("product_option_values", entity(
            "products/{product_id}/options/{option_id}/values", "data", ["product_id", "option_id"],
        )),
        ("product_reviews", entity("products/{product_id}/reviews", "data", ["product_id"])),

        ("orders", entity("orders", "data", item_template="orders/{order_id}", writable=True)),
        ("order", entity("orders/{order_id}", required=["order_id"])),
        ("order_products", entity("orders/{order_id}/products", "data", ["order_id"])),
        ("order_totals", entity("orders/{order_id}/totals", "data", ["order_id"])),
        ("order_histories", entity("orders/{order_id}/histories", "data", ["order_id"])),

        ("customers", entity("customers", "data", item_template="customers/{customer_id}", writable=True)),
        ("customer", entity("customers/{customer_id}", required=["customer_id"])),
        ("customer_groups", entity("customers/groups", "data")),
        ("customer_addresses", entity("customers/{customer_id}/addresses", "data", ["customer_id"])),

        ("manufacturers", entity("manufacturers", "data")),
        ("manufacturer", entity("manufacturers/{manufacturer_id}", required=["manufacturer_id"])),

        ("attributes", entity("attributes", "data")),
        ("attribute_groups", entity("attributes/groups", "data")),
        ("options", entity("options", "data")),
        ("option_values", entity("options/{option_id}/values", "data", ["option_id"])),

        ("coupons", entity("coupons", "data")),
        ("vouchers", entity("vouchers", "data")),
        ("reviews", entity("reviews", "data")),

        ("returns", entity("returns", "data")),
        ("return", entity("returns/{return_id}", required=["return_id"])),
        ("affiliates", entity("affiliates", "data")),
        ("affiliate", entity("affiliates/{affiliate_id}", required=["affiliate_id"])),
        ("marketing", entity("marketing", "data")),

        ("zones", entity("zones", "data")),
        ("geo_zones", entity("geo_zones", "data")),
        ("geo_zone_zones", entity("geo_zones/{geo_zone_id}/zones", "data", ["geo_zone_id"])),
        ("languages", entity("languages", "data")),
        ("currencies", entity("currencies", "data")),
        ("stock_statuses", entity("stock_statuses", "data")),
        ("order_statuses", entity("order_statuses", "data")),
        ("tax_classes", entity("tax_classes", "data")),
        ("tax_rates", entity("tax_rates", "data")),
        ("weight_classes", entity("weight_classes", "data")),
        ("length_classes", entity("length_classes", "data")),
        ("informations", entity("informations", "data")),
        ("information", entity("informations/{information_id}", required=["information_id"])),
    ],
    paging=PagingConfig(
        strategy="page", page_param="page", size_param="limit",
        min_size=1, max_size=100,
    ),
)
