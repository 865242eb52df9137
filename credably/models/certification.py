from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, JSON
from datetime import datetime
from credably.database import Base


class Certification(Base):
    __tablename__ = "certifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    issuer = Column(String(255), nullable=False)
    issue_date = Column(DateTime, nullable=False)
    expiry_date = Column(DateTime, nullable=True)
    credential_id = Column(String(255), nullable=True)
    credential_url = Column(String(500), nullable=True)
    verified = Column(Boolean, default=False)
    verification_method = Column(String(50), nullable=True)
    verification_date = Column(DateTime, nullable=True)
    trust_score = Column(Integer, default=50)
    skills = Column(JSON, default=list)
    metadata_ = Column("metadata", JSON, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "issuer": self.issuer,
            "issueDate": self.issue_date.isoformat() if self.issue_date else None,
            "expiryDate": self.expiry_date.isoformat() if self.expiry_date else None,
            "credentialId": self.credential_id,
            "credentialUrl": self.credential_url,
            "verified": self.verified,
            "verificationMethod": self.verification_method,
            "trustScore": self.trust_score,
            "skills": self.skills or [],
            "metadata": self.metadata_ or {},
        }
