from sqlalchemy import Column, Integer, String, DateTime, Boolean, Float, ForeignKey, JSON
from datetime import datetime
from credably.database import Base


class EducationRecord(Base):
    __tablename__ = "education_records"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    institution_name = Column(String(255), nullable=False)
    degree = Column(String(255), nullable=False)
    degree_level = Column(String(50), nullable=True)
    field = Column(String(255), nullable=True)
    gpa = Column(Float, nullable=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=True)
    verified = Column(Boolean, default=False)
    verification_source = Column(String(100), nullable=True)
    verification_date = Column(DateTime, nullable=True)
    credential_id = Column(String(255), nullable=True)
    trust_score = Column(Integer, default=50)
    metadata_ = Column("metadata", JSON, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "institutionName": self.institution_name,
            "degree": self.degree,
            "degreeLevel": self.degree_level,
            "field": self.field,
            "gpa": self.gpa,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "verified": self.verified,
            "verificationSource": self.verification_source,
            "credentialId": self.credential_id,
            "trustScore": self.trust_score,
            "metadata": self.metadata_ or {},
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
