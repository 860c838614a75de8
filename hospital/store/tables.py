import datetime as dt

from sqlalchemy import Date, DateTime, Enum as SAEnum, ForeignKey, Index, String, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from hospital.domain.models import AppointmentStatus, Specialty


class Base(DeclarativeBase):
    pass


class PatientRow(Base):
    __tablename__ = "patients"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    national_id: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    birth_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(15), nullable=True)
    email: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    history: Mapped["MedicalHistoryRow | None"] = relationship(
        back_populates="patient",
        cascade="all, delete-orphan",
        uselist=False,
    )
    appointments: Mapped[list["AppointmentRow"]] = relationship(
        back_populates="patient",
        cascade="all, delete-orphan",
    )


class DoctorRow(Base):
    __tablename__ = "doctors"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    license_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    specialty: Mapped[Specialty] = mapped_column(
        SAEnum(Specialty, native_enum=False, length=30), nullable=False
    )
    email: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    appointments: Mapped[list["AppointmentRow"]] = relationship(back_populates="doctor")


class AppointmentRow(Base):
    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(primary_key=True)
    scheduled_at: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False)
    reason: Mapped[str | None] = mapped_column(String(200), nullable=True)
    status: Mapped[AppointmentStatus] = mapped_column(
        SAEnum(AppointmentStatus, native_enum=False, length=20),
        nullable=False,
        default=AppointmentStatus.SCHEDULED,
    )
    patient_id: Mapped[int] = mapped_column(
        ForeignKey("patients.id", ondelete="CASCADE"), nullable=False
    )
    doctor_id: Mapped[int] = mapped_column(
        ForeignKey("doctors.id", ondelete="RESTRICT"), nullable=False
    )

    patient: Mapped[PatientRow] = relationship(
        back_populates="appointments", lazy="joined", innerjoin=True
    )
    doctor: Mapped[DoctorRow] = relationship(
        back_populates="appointments", lazy="joined", innerjoin=True
    )

    __table_args__ = (
        Index("ix_appointments_patient", "patient_id"),
        Index("ix_appointments_doctor", "doctor_id"),
        Index("ix_appointments_scheduled_at", "scheduled_at"),
        # One active appointment per doctor and slot
        Index(
            "uq_appointments_active_slot",
            "doctor_id",
            "scheduled_at",
            unique=True,
            sqlite_where=text("status = 'SCHEDULED'"),
            postgresql_where=text("status = 'SCHEDULED'"),
        ),
    )

    @property
    def patient_name(self) -> str | None:
        return self.patient.name if self.patient is not None else None

    @property
    def doctor_name(self) -> str | None:
        return self.doctor.name if self.doctor is not None else None


class MedicalHistoryRow(Base):
    __tablename__ = "medical_histories"

    patient_id: Mapped[int] = mapped_column(
        ForeignKey("patients.id", ondelete="CASCADE"), primary_key=True
    )
    allergies: Mapped[str | None] = mapped_column(String(500), nullable=True)
    background: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    observations: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    patient: Mapped[PatientRow] = relationship(back_populates="history")
