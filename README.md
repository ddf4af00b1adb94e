# sqlrepokit

A small layer over SQLAlchemy 2.x that gives you:

- **Configuration** (`sqlrepokit.config`): a `Config` dataclass holding host, port, user, password,
  database name, schema, SSL mode, driver and a debug flag. `default_config()` fills it from
  `DATABASE_*` environment variables, falling back to built-in defaults.
- **Data sources** (`sqlrepokit.datasource`): `open_datasource()` builds a connection URL (with
  `DefaultDSNBuilder` or a `DSNBuilder` of your own), creates an engine and checks the connection with
  `SELECT 1`. It returns a `DataSource`.
- **Named data sources** (`sqlrepokit.manager`): `Manager` registers, looks up and closes several data
  sources by name.
- **Query methods from method names** (`sqlrepokit.query_methods`): the `@query` marker and the parser
  that turns names such as `FindByUserNameOrderByIDDesc` into SQL conditions, ordering and a limit.
- **Generic repositories** (`sqlrepokit.repository`): `Repository` with insert, find by id, select,
  update, delete, count, exists, raw queries and paging (`Page`), and `fill_func_fields()`, which
  implements the methods marked with `@query`.
- **A runnable example** (`sqlrepokit.example`): a `UserModel`, a `UserRepository` and a
  `sqlrepokit-example` command.

## Installation

```
pip install sqlrepokit
```

Install a database driver for your backend too: the URLs built by `DefaultDSNBuilder` use the default
PostgreSQL driver (`psycopg2`) for `postgres` and `pymysql` for `mysql`.

## Configuration

```python
from sqlrepokit.config import Config, default_config

password = "password"
config = Config(host="localhost", port="5432", user="user", password=password,
                dbname="app", schema="public", sslmode="disable", driver="postgres")

# Or from the environment: DATABASE_HOST, DATABASE_PORT, DATABASE_USER, DATABASE_PASSWORD,
# DATABASE_DBNAME, DATABASE_SCHEMA, DATABASE_SSLMODE, DATABASE_DEBUG, DATABASE_DRIVER
config = default_config()
config = default_config({"DATABASE_HOST": "db.internal"})  # any mapping instead of os.environ
```

Defaults are `localhost`, `5432`, `postgres`, `password`, `postgres`, `public`, `disable`, debug on,
driver `postgres`. Empty variables count as unset. `DATABASE_DEBUG` is true for `1`, `t`, `T`, `true`,
`True` or `TRUE`.

## Opening a data source

```python
from sqlrepokit.datasource import open_datasource

ds = open_datasource(config)                     # URL built by DefaultDSNBuilder
ds = open_datasource(config, debug=False)        # overrides config.debug
ds = open_datasource(config, url="sqlite://")    # an explicit URL wins over any builder
ds = open_datasource(config, engine_options={"pool_size": 5})  # passed to create_engine

with ds.session() as session:
    ...
ds.close()       # or use the DataSource itself as a context manager
```

- For `postgres` the schema is set through `search_path` and `sslmode` is passed on; for `mysql` the
  charset is `utf8mb4`. Any other driver raises `UnsupportedDriverError`; a non-numeric port raises
  `ValueError`.
- In debug mode the engine echoes SQL statements (`echo=True`, unless `engine_options` sets it).
- If the connection check fails, the engine is disposed and the error propagates.
- `session()` on a closed data source raises `RuntimeError`.

To build URLs for another database, subclass `DSNBuilder` and implement `build(config)`, returning a
SQLAlchemy `URL` or a URL string; pass it as `dsn_builder=`.

## Several data sources

```python
from sqlrepokit.manager import Manager

manager = Manager()
manager.register("main", config)                 # keyword arguments go to open_datasource
manager.register("reports", config, url="sqlite://")
ds = manager.get("main")                         # unknown names raise DataSourceNotFoundError
manager.close_all()                              # close failures are logged, not raised
```

## Repositories

```python
from sqlrepokit.repository import Repository

repo = Repository(ds, UserModel)                 # UserModel: any SQLAlchemy mapped class

repo.insert(user)                                # calls user.before_create() if it exists
user = repo.find_by_id(user_id)                  # NoResultFound if absent
users = repo.select("status = ? AND total > ?", "active", 3)
user = repo.select_one("email = ?", "alice@example.com")
repo.update(user)                                # calls user.before_update() if it exists
repo.delete_by_id(user_id)                       # a missing row is not an error
everyone = repo.list_all()
n = repo.count()
n = repo.count_by("status = ?", "active")
rows = repo.raw_query("SELECT * FROM user_tbl WHERE total > ?", 3)
found = repo.exists("user_name = ?", "alice")
page = repo.pageable(1, 20, "status = ?", "active")   # Page(items, total_count, page, page_size)
name = repo.table_name()
```

String conditions use `?` placeholders bound in order; a mismatch between placeholders and arguments
raises `ValueError`. `select`, `select_one`, `count_by` and `pageable` also accept a SQLAlchemy
expression (e.g. `UserModel.status == "active"`) with no further arguments. `select_one` returns the
first match by primary key and raises `NoResultFound` when there is none.

## Query methods

```python
from sqlrepokit.query_methods import query
from sqlrepokit.repository import Repository

class UserRepository(Repository):
    @query
    def find_by_user_name(self, user_name): ...

    @query
    def find_by_user_name_and_email_or_partner_id(self, user_name, email, partner_id): ...

    @query
    def find_all_by_email_order_by_id_desc_limit_10(self, email): ...

repo = UserRepository(ds, UserModel)
repo.fill_func_fields(repo)

user = repo.find_by_user_name("alice")
users = repo.find_all_by_email_order_by_id_desc_limit_10("alice@example.com")
```

`@query` stores the CamelCase form of the method name (`FindAllByEmailOrderByIdDescLimit10`).
`fill_func_fields(target)` replaces every marked method on `target` with a finder:

- Conditions are field names joined by `And` and `Or` (`And` binds tighter), each becoming
  `column = ?`; column names are the snake_case form of the field (`UserName` → `user_name`,
  `URLString` → `url_string`). Field names that themselves contain `And` or `Or` are split too.
- An optional `OrderBy<Field>` with `Desc` or `Asc` (ascending by default), then `Limit<n>`.
- The method's parameters after `self` supply the values, in order; defaults and keywords are honoured.
- `find_by...` returns the first match and raises `NoResultFound` when there is none;
  `find_all_by...` returns a list, capped by the limit if one is given.
- Names not starting with `FindBy`/`FindAllBy`, or with a non-numeric limit, raise `ValueError`.

The parsing helpers are available directly: `parse_method_name()` returns a `QueryParts`
(`where_clauses`, `order_by`, `limit`), `build_where_clause()` joins its clauses with `OR`, and
`to_snake_case()` and `parse_order_by()` do the name handling.

## Example

```
sqlrepokit-example                      # connects to PostgreSQL on localhost:5432
sqlrepokit-example --url sqlite://      # any connection URL instead
sqlrepokit-example --no-debug           # do not echo SQL statements
```

It opens a data source, runs `find_by_id`, `exists`, `count_by` and `find_by_user_name` against the
`user_tbl` table through `UserRepository`, and prints each result or the database error. It exits with
status 1 if the database cannot be opened.

## What this package does not do

It does not create or migrate tables, and it reads settings only from a `Config` you build or from
environment variables, not from configuration files.