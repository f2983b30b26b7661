from pydantic import BaseModel, ConfigDict, Field


class ProcessImageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_data_url: str | None = Field(default=None, alias="imageDataUrl")


class ProcessImageResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_url: str = Field(alias="imageUrl")
