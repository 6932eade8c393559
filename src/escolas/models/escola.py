from sqlalchemy import String, LargeBinary
from sqlalchemy.orm import Mapped, mapped_column

from escolas.database.base import Base


class EscolaRecord(Base):
    """
    SQLAlchemy model for the `escola` table: the persisted counterpart of the
    `Escola` entity. Column names match the wire field names exactly.
    """
    __tablename__ = "escola"

    # 36-character identifier (primary key)
    guid: Mapped[str] = mapped_column("EscolaGUID", String(36), primary_key=True)

    # School name; the unique index makes storage the final word on duplicates
    nome: Mapped[str | None] = mapped_column("EscolaNome", String(100), nullable=True, unique=True)

    # Colors as 6 HEX digits
    cor_pri_es: Mapped[str | None] = mapped_column("EscolaCorPriEs", String(6), nullable=True)
    cor_pri_cl: Mapped[str | None] = mapped_column("EscolaCorPriCl", String(6), nullable=True)
    cor_sec_es: Mapped[str | None] = mapped_column("EscolaCorSecEs", String(6), nullable=True)
    cor_sec_cl: Mapped[str | None] = mapped_column("EscolaCorSecCl", String(6), nullable=True)

    # Raw icon bytes; LargeBinary maps to BLOB on MySQL
    icone: Mapped[bytes | None] = mapped_column("EscolaIcone", LargeBinary(length=16_777_215), nullable=True)

    def __repr__(self) -> str:
        return f"<EscolaRecord(guid={self.guid!r}, nome={self.nome!r})>"
