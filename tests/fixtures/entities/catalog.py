from sqlmodel import Field, SQLModel


class Product(SQLModel, table=True):
    __tablename__ = "discovered_product"

    id: int | None = Field(default=None, primary_key=True)
    title: str


class ProductIn(SQLModel):
    title: str
