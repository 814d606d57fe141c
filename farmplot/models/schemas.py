from sqlalchemy import ForeignKey
from sqlalchemy.orm import DeclarativeBase, relationship
from sqlalchemy.schema import Column
from sqlalchemy.types import BigInteger, Integer, String


class Base(DeclarativeBase):
    pass


class Player(Base):
    __tablename__ = "players"
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False, unique=True)
    hash_token = Column(String, nullable=False)
    salt = Column(String, nullable=False)

    plots = relationship(
        "PlotRow",
        back_populates="player",
        cascade="all, delete",
        order_by="PlotRow.plot_id",
    )


class PlotRow(Base):
    __tablename__ = "plots"
    player_id = Column(Integer, ForeignKey("players.id"), primary_key=True)
    plot_id = Column(Integer, primary_key=True)
    item = Column(Integer, nullable=False, default=0)
    transition_at = Column(BigInteger, nullable=False, default=0)  # epoch seconds, 0 = none

    player = relationship("Player", back_populates="plots")
