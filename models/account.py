from sqlalchemy import Column, Integer, String, Numeric
from database import db
from models.money import ZERO


class Account(db.Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    # saldo cacheado: solo lo modifica ledger.balance.adjust_balance
    balance = Column(Numeric(12, 2), nullable=False, default=ZERO)
    # saldo con el que se creó la cuenta, no cambia nunca
    opening_balance = Column(Numeric(12, 2), nullable=False, default=ZERO)

    def __repr__(self):
        return f"<Account id={self.id} name={self.name} balance={self.balance}>"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "balance": str(self.balance),
            "opening_balance": str(self.opening_balance),
        }
