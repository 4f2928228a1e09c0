from sqlalchemy import BigInteger, Column, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from city_explorer.database import Base


class Weather(Base):
    """One day of forecast for a location."""

    __tablename__ = "weather"

    id = Column(Integer, primary_key=True, index=True)
    forecast = Column(Text, nullable=False, default="")
    formatted_date = Column(String, nullable=False)
    created_at = Column(BigInteger, nullable=False)  # ms since epoch
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False, index=True)

    location = relationship("Location", back_populates="weather")


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    link = Column(String, nullable=False, default="")
    name = Column(String, nullable=False)
    event_date = Column(String, nullable=False, default="")
    summary = Column(Text, nullable=False, default="")
    created_at = Column(BigInteger, nullable=False)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False, index=True)

    location = relationship("Location", back_populates="events")


class Movie(Base):
    __tablename__ = "movies"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    overview = Column(Text, nullable=False, default="")
    average_votes = Column(Float, nullable=False, default=0.0)
    total_votes = Column(Integer, nullable=False, default=0)
    image_url = Column(String)
    popularity = Column(Float, nullable=False, default=0.0)
    released_on = Column(String, nullable=False, default="")
    created_at = Column(BigInteger, nullable=False)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False, index=True)

    location = relationship("Location", back_populates="movies")


class CategoryFetch(Base):
    """When the current generation of a (location, category) was fetched.

    Lets an empty upstream result count as a fresh, cached generation.
    """

    __tablename__ = "category_fetches"

    id = Column(Integer, primary_key=True, index=True)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False)
    category = Column(String, nullable=False)
    fetched_at = Column(BigInteger, nullable=False)  # ms since epoch

    __table_args__ = (UniqueConstraint("location_id", "category", name="uq_category_fetch_location"),)
