from dataclasses import dataclass
from typing import List, Literal, Optional
from pydantic import BaseModel, Field
from datetime import datetime, timezone

class EducationItem(BaseModel):
    id: str
    degree: str
    institution: str
    year_of_completion: str = Field(..., alias="yearOfCompletion")
    details: Optional[str] = None

    class Config:
        populate_by_name = True

class ExperienceItem(BaseModel):
    id: str
    job_title: str = Field(..., alias="jobTitle")
    company_name: str = Field(..., alias="companyName")
    start_date: str = Field(..., alias="startDate")
    end_date: str = Field(..., alias="endDate")  # may be "Present"
    description: Optional[str] = None

    class Config:
        populate_by_name = True

class ProjectItem(BaseModel):
    id: str
    title: str
    description: str
    technologies_used: List[str] = Field(default_factory=list, alias="technologiesUsed")
    project_url: Optional[str] = Field(None, alias="projectUrl")

    class Config:
        populate_by_name = True

class UserProfile(BaseModel):
    """User record stored at users/{uid}, including the session fence fields."""
    uid: str
    email: Optional[str] = None
    name: Optional[str] = None
    profile_field: Optional[str] = Field(None, alias="profileField")
    role: Optional[str] = None
    company: Optional[str] = None
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    key_skills: List[str] = Field(default_factory=list, alias="keySkills")
    experiences: List[ExperienceItem] = Field(default_factory=list)
    projects: List[ProjectItem] = Field(default_factory=list)
    education_history: List[EducationItem] = Field(default_factory=list, alias="educationHistory")
    accomplishments: Optional[str] = None
    resume_file_name: Optional[str] = Field(None, alias="resumeFileName")
    resume_processed_text: Optional[str] = Field(None, alias="resumeProcessedText")
    interviews_taken: int = Field(0, ge=0, alias="interviewsTaken")
    is_plus_subscriber: bool = Field(False, alias="isPlusSubscriber")
    subscription_plan: Optional[Literal["monthly", "quarterly", "yearly"]] = Field(None, alias="subscriptionPlan")
    is_admin: bool = Field(False, alias="isAdmin")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
    # Session fence
    active_session_id: Optional[str] = Field(None, alias="activeSessionId")
    session_device_info: Optional[str] = Field(None, alias="sessionDeviceInfo")
    session_start_time: Optional[datetime] = Field(None, alias="sessionStartTime")
    session_last_active: Optional[datetime] = Field(None, alias="sessionLastActive")

    class Config:
        populate_by_name = True # allows camelcase and snake_case interchangeably

    def candidate_summary(self) -> str:
        """One-line candidate description handed to the feedback capability."""
        skills = ", ".join(self.key_skills) if self.key_skills else "Not specified"
        education = "; ".join(f"{item.degree}, {item.institution}" for item in self.education_history) or "Not specified"
        summary = (
            f"Field: {self.profile_field or 'Not specified'}, "
            f"Role: {self.role or 'Not specified'}, "
            f"Education: {education}, "
            f"Skills: {skills}"
        )
        if self.resume_processed_text:
            summary += f", Resume: {self.resume_processed_text}"
        return summary

class ProfileUpdate(BaseModel):
    """Partial profile update. Only fields that are set are written."""
    name: Optional[str] = Field(None, max_length=100)
    profile_field: Optional[str] = Field(None, alias="profileField", max_length=100)
    role: Optional[str] = Field(None, max_length=100)
    company: Optional[str] = Field(None, max_length=100)
    phone_number: Optional[str] = Field(None, alias="phoneNumber", max_length=30)
    key_skills: Optional[List[str]] = Field(None, alias="keySkills")
    experiences: Optional[List[ExperienceItem]] = None
    projects: Optional[List[ProjectItem]] = None
    education_history: Optional[List[EducationItem]] = Field(None, alias="educationHistory")
    accomplishments: Optional[str] = Field(None, max_length=5000)
    resume_file_name: Optional[str] = Field(None, alias="resumeFileName", max_length=255)
    resume_processed_text: Optional[str] = Field(None, alias="resumeProcessedText", max_length=20000)

    class Config:
        populate_by_name = True

class SessionFenceResponse(BaseModel):
    session_id: str = Field(..., alias="sessionId")

    class Config:
        populate_by_name = True

class SessionValidationResponse(BaseModel):
    valid: bool

@dataclass
class RequestContext:
    """Per-request identity handed to route handlers instead of ambient state.

    Created once the Firebase token is verified and the profile is loaded;
    discarded with the request.
    """
    uid: str
    token: dict
    profile: UserProfile
