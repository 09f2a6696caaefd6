from sqlalchemy.orm import Mapped, mapped_column

from app.types.sqlalchemy import Base, PrimaryKey


class SchoolRecord(Base):
    __tablename__ = "school_directory"

    # Assigned as MAX + 1 by the insert statement itself, see `cruds_schools.create_school`
    ordering_number: Mapped[int] = mapped_column(unique=True, index=True)
    id: Mapped[PrimaryKey]
    name: Mapped[str]
    address: Mapped[str]
    city: Mapped[str]
    state: Mapped[str]
    contact: Mapped[str]
    email: Mapped[str]
    image: Mapped[str] = mapped_column(default="")
