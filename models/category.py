from sqlalchemy import Column, Integer, String, Enum
from database import db


class Category(db.Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(String(255), nullable=True)
    kind = Column(Enum("income", "expense", name="category_kind_enum"), nullable=False)

    def __repr__(self):
        return f"<Category id={self.id} name={self.name} kind={self.kind}>"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "kind": self.kind,
        }
