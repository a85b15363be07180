# fixparts

fixparts is a small Flask web service for an auto-parts shop. It stores its data in a local SQLite database.

It covers these areas:

- **Items.** Each item has a part number, a description, buy and sell prices, current and minimum stock, a storage location and a barcode. Barcodes can be rendered as Code 128 PNG images.
- **Categories.** Categories nest to form a tree.
- **Vehicle compatibility.** Links record which vehicle submodels an item fits.
- **Purchases.** A purchase is stock bought from a supplier. It can carry an invoice number, and that number must be unique.
- **Dashboard.** HTML fragments for low stock, today's sales, item and vehicle counts, recent sales, top sellers and recent purchases.

## Installation

```
pip install .
```

To include the test dependencies:

```
pip install ".[test]"
```

## Running the server

```
fixparts
```

The command takes these options:

| Option | Meaning |
| --- | --- |
| `--database PATH` | SQLite file to use. Defaults to `$FIXPARTS_DATABASE`, or `fixparts.db` if that is not set. |
| `--host ADDRESS` | Address to listen on. Default `127.0.0.1`. |
| `--port PORT` | Port to listen on. Default `8080`. |

On start-up the command does three things:

1. It opens the database.
2. It creates any missing tables with `fixparts.database.create_schema`.
3. It serves the application with Flask's built-in server.

If the database cannot be opened or set up, it prints `Failed to connect to database: ...` and exits with status 1.

## Using it from Python

`fixparts.app.create_app` builds the Flask application around an open connection:

```python
from fixparts.app import create_app
from fixparts.database import connect, create_schema

connection = connect("fixparts.db")
create_schema(connection)
app = create_app(connection)
```

`connect` opens the database in autocommit mode. It returns rows that can be read by column name and turns foreign keys on.

### Services

Each service can be used without the web layer:

| Module | Service | Repository |
| --- | --- | --- |
| `fixparts.items` | `ItemService` | `ItemRepository` |
| `fixparts.categories` | `CategoryService` | `CategoryRepository` |
| `fixparts.compatibility` | `CompatibilityService` | `CompatibilityRepository` |
| `fixparts.purchases` | `PurchaseService` | `PurchaseRepository` |
| `fixparts.dashboard` | `DashboardService` | `DashboardRepository` |

`CompatibilityService` also needs an `ItemRepository`.

```python
from fixparts.items import Item, ItemRepository, ItemService

items = ItemService(ItemRepository(connection))
new_id = items.create_item(
    Item(part_number="BRK-100", description="Brake pad set", buy_price=20.0, sell_price=35.0)
)
```

### What the services check

**Items**

- `ItemService.create_item` and `update_item` require a part number and a description. Both prices must be above zero. Stock figures must not be negative. If a check fails, they raise `ItemValidationError`.
- When an item has no barcode, `create_item` generates one of the form `C<category:03>-S<supplier:03>-<yymmddHHMMSS>-<8 random characters>`.
- A part number or barcode already in use raises `DuplicatePartNumberError` or `DuplicateBarcodeError`.

**Categories**

- A category's parent must exist, or `ParentCategoryNotFoundError` is raised.
- A category cannot be its own parent, or `CircularReferenceError` is raised.
- A category that still has children cannot be deleted, or `CategoryHasSubcategoriesError` is raised.
- `build_category_tree` arranges a list of categories into `CategoryTreeNode` trees.

**Purchases**

- A purchase needs positive supplier and item ids, a positive quantity and a positive cost per unit.
- A date in the future raises `InvalidDateError`.
- On create, a missing date becomes the current time, and a zero total cost becomes quantity × cost per unit.
- On update, the total cost is always recalculated.

**Compatibility**

- Adding a link requires the item to exist.
- Adding a link twice raises `CompatibilityExistsError`.

### Barcode images

`fixparts.barcode.BarcodeService.generate_barcode_image(text)` returns a 300×100 grayscale PNG of the text encoded as Code 128. It raises `ValueError` in three cases:

- the text is empty;
- the text has non-ASCII characters;
- the text is too long to fit in 300 pixels.

`fixparts.barcode.encode_code128(text)` returns the bar pattern as a list of booleans, where `True` is a bar.

## HTTP API

JSON errors are returned as `{"message": "..."}`.

| Status | Returned for |
| --- | --- |
| 201 | a record was created |
| 204 | a record was deleted |
| 400 | an identifier in the path is not a number, or the request body is not valid JSON of the right types |
| 404 | the record is missing |
| 409 | a duplicate was found |
| 500 | any other failure |

### Categories — `/api/inventory/categories`

- `GET /api/inventory/categories`
- `GET /api/inventory/categories/tree`
- `GET /api/inventory/categories/<id>`: the category with its direct subcategories.
- `GET /api/inventory/categories/<id>/subcategories`
- `POST /api/inventory/categories`: returns 400 if the parent is missing.
- `PUT /api/inventory/categories/<id>`: returns 404 if the category is missing. Returns 400 if the parent is missing or is the category itself.
- `DELETE /api/inventory/categories/<id>`: returns 400 if the category still has subcategories.

### Items — `/api/inventory/items`

- `GET /api/inventory/items` accepts these query parameters:
  - `category_id` and `supplier_id`: exact match.
  - `part_number`: matches part of the part number.
  - `search`: matches part of the part number or the description.
  - `low_stock=true`
  - `is_active=true|false`

  Parameters that do not parse are ignored.
- `GET /api/inventory/items/low-stock`: active items at or below their minimum stock.
- `GET /api/inventory/items/<id>`
- `GET /api/inventory/items/barcode/<barcode>`
- `GET /api/inventory/items/barcode/<barcode>/image`: returns a PNG image.
- `POST /api/inventory/items`
- `PUT /api/inventory/items/<id>`
- `DELETE /api/inventory/items/<id>`

Duplicate part numbers or barcodes return 409. Failed item validation returns 500, with the validation message.

### Compatibility

- `GET /api/inventory/items/<itemId>/compatibilities`
- `POST /api/inventory/items/<itemId>/compatibilities`: the item and submodel ids are read from the JSON body, not from the path. Returns 404 if the item is missing and 409 if the link already exists.
- `DELETE /api/inventory/items/<itemId>/compatibilities/<submodelId>`
- `GET /api/inventory/submodels/<submodelId>/compatible-items`

### Purchases — `/api/purchases`

- `GET /api/purchases` accepts these query parameters:
  - `supplier_id`
  - `item_id`
  - `start_date` and `end_date`, in RFC 3339 form
  - `invoice_number`: matches part of the invoice number.

  Parameters that do not parse are ignored. Results come newest first.
- `GET /api/purchases/<id>`
- `POST /api/purchases`
- `PUT /api/purchases/<id>`
- `DELETE /api/purchases/<id>`
- `GET /api/suppliers/<supplierId>/purchases`
- `GET /api/items/<itemId>/purchases`

Validation errors return 400. A duplicate invoice number returns 409.

### Dashboard fragments — `/api`

Each of these returns a small HTML fragment. The labels are in Turkish.

- `/api/inventory/low-stock-count`
- `/api/sales/today`
- `/api/inventory/total-count`
- `/api/compatibility/vehicle-count`
- `/api/inventory/low-stock`
- `/api/sales/recent`
- `/api/sales/top-sellers`
- `/api/purchases/recent`

## What it does not do

- **No pages.** Nothing is served at `/`. The dashboard exists only as the fragments listed above.
- **No API for some tables.** Suppliers, vehicle makes, models and submodels, and sales must be written to the database by other means. The dashboard and compatibility endpoints only read them.
- **No authentication.** There are no user accounts or access control.
- **Development server only.** The `fixparts` command uses Flask's development server.

## Tests

```
pytest
```