from pydantic import BaseModel, ConfigDict, Field


class AdminStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_biodata: int = Field(alias="totalBiodata")
    male_count: int = Field(alias="maleCount")
    female_count: int = Field(alias="femaleCount")
    premium_count: int = Field(alias="premiumCount")
    total_revenue: float = Field(alias="totalRevenue")


class SuccessCounter(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_profiles: int = Field(alias="totalProfiles")
    boys_count: int = Field(alias="boysCount")
    girls_count: int = Field(alias="girlsCount")
    marriages_count: int = Field(alias="marriagesCount")


__all__ = ["AdminStats", "SuccessCounter"]
