"""
Database Schemas

Define your MongoDB collection schemas here using Pydantic models.
Each Pydantic model corresponds to a MongoDB collection. The collection
name is the lowercase of the class name by convention.

Example: class WeddingStory -> collection "weddingstory"

Create models enforce required fields and carry explicit defaults; the
matching ...Update models accept any subset of fields for PUT/PATCH. In
those, a field that is required or non-null on create defaults to None
but still rejects an explicit null; only the nullable fields can be
cleared.
"""
from typing import Annotated, Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, EmailStr, Field, ValidationError

from errors import InvalidInput, describe_validation_errors

NonEmpty = Annotated[str, Field(min_length=1)]
Url = Annotated[str, Field(pattern=r"^https?://\S+$")]
ObjectIdStr = Annotated[str, Field(pattern=r"^[0-9a-fA-F]{24}$")]
Count = Annotated[int, Field(ge=0)]

MediaType = Literal["image", "video"]
SectionKey = Literal["hero", "editor_pick", "latest"]
ServiceType = Literal["Wedding", "Corporate", "Party", "Other"]
PhotoType = Literal["wedding", "prewedding"]
FlexPosition = Literal["flex-start", "flex-center", "flex-end"]


# Auth/User
class Admin(BaseModel):
    email: EmailStr = Field(..., description="Admin email (unique, lower-cased)")
    password: str = Field(..., description="BCrypt hash of password")
    role: str = Field("admin", description="Role")


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


# Shared sub-documents
class Photo(BaseModel):
    url: NonEmpty
    publicId: NonEmpty


class CoverImage(BaseModel):
    url: Url
    publicId: str


class StoryImage(BaseModel):
    url: Url
    publicId: str
    type: Literal["image"] = "image"


class StoryVideo(BaseModel):
    url: Url
    publicId: str
    type: Literal["video"] = "video"


# About
class About(BaseModel):
    experienceYears: Count
    weddingsCompleted: Count
    destinations: Count
    happyCouples: Count
    images: List[str] = Field(default_factory=list)


class AboutUpdate(BaseModel):
    experienceYears: Count = None
    weddingsCompleted: Count = None
    destinations: Count = None
    happyCouples: Count = None
    images: List[str] = None


# Films
class Film(BaseModel):
    title: NonEmpty
    category: NonEmpty
    videoUrl: NonEmpty
    videoPublicId: NonEmpty


class FilmUpdate(BaseModel):
    title: NonEmpty = None
    category: NonEmpty = None


# Footer (singleton)
class Footer(BaseModel):
    phone: NonEmpty
    email: NonEmpty
    instagram: str = ""
    youtube: str = ""
    facebook: str = ""


class FooterUpdate(BaseModel):
    phone: NonEmpty = None
    email: NonEmpty = None
    instagram: str = None
    youtube: str = None
    facebook: str = None


# Gallery
class Gallery(BaseModel):
    imageUrl: NonEmpty
    imagePublicId: NonEmpty
    category: NonEmpty
    isHighlight: bool = Field(False, description="Shown in the homepage marquee")


# Hero
class HeroStyles(BaseModel):
    textColor: str = "#ffffff"
    studioNameColor: str = "#ffffff"
    locationColor: str = "#ffffff"
    taglineColor: str = "#ffffff"
    overlayOpacity: float = Field(0.5, ge=0, le=0.9)
    justifyContent: FlexPosition = "flex-center"
    alignItems: FlexPosition = "flex-center"
    verticalSpacing: int = Field(0, ge=-100, le=100)


class Hero(BaseModel):
    imageUrl: NonEmpty
    imagePublicId: NonEmpty
    mobileImageUrl: Optional[str] = None
    mobileImagePublicId: Optional[str] = None
    title: str = "Shivay Video"
    subtitle: str = "Where emotions become timeless frames"
    location: str = "Junagadh • Gujarat"
    styles: HeroStyles = Field(default_factory=HeroStyles)


class HeroUpdate(BaseModel):
    imageUrl: NonEmpty = None
    imagePublicId: NonEmpty = None
    mobileImageUrl: Optional[str] = None
    mobileImagePublicId: Optional[str] = None
    title: str = None
    subtitle: str = None
    location: str = None
    styles: HeroStyles = None


# Media
class Media(BaseModel):
    type: MediaType
    category: NonEmpty
    url: Url
    publicId: NonEmpty
    thumbnail: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    isHomepage: bool = False


class MediaUpdate(BaseModel):
    type: MediaType = None
    category: NonEmpty = None
    url: Url = None
    publicId: NonEmpty = None
    thumbnail: Optional[str] = None
    tags: List[str] = None
    isHomepage: bool = None


# Our story
class OurStory(BaseModel):
    imageUrl: NonEmpty
    imagePublicId: NonEmpty
    startedYear: int = Field(..., ge=1900, le=2100)
    description: NonEmpty


class OurStoryUpdate(BaseModel):
    imageUrl: NonEmpty = None
    imagePublicId: NonEmpty = None
    startedYear: int = Field(None, ge=1900, le=2100)
    description: NonEmpty = None


# Reels
class Reel(BaseModel):
    title: NonEmpty
    videoUrl: Url
    publicId: NonEmpty
    thumbnail: Optional[str] = None
    showOnHomepage: bool = False


class ReelUpdate(BaseModel):
    title: NonEmpty = None
    videoUrl: Url = None
    publicId: NonEmpty = None
    thumbnail: Optional[str] = None
    showOnHomepage: bool = None


# Reviews
class Review(BaseModel):
    coupleName: NonEmpty
    review: NonEmpty
    place: NonEmpty
    serviceType: NonEmpty


class ReviewUpdate(BaseModel):
    coupleName: NonEmpty = None
    review: NonEmpty = None
    place: NonEmpty = None
    serviceType: NonEmpty = None


# Homepage sections, addressed by key
class Section(BaseModel):
    key: SectionKey
    contentIds: List[ObjectIdStr] = Field(default_factory=list)
    enabled: bool = True
    order: int = 0


class SectionUpdate(BaseModel):
    key: SectionKey = None
    contentIds: List[ObjectIdStr] = None
    enabled: bool = None
    order: int = None


# Services
class Service(BaseModel):
    serviceName: NonEmpty
    serviceType: ServiceType
    imageUrl: NonEmpty
    imagePublicId: NonEmpty
    description: Optional[str] = None
    isActive: bool = True


class ServiceUpdate(BaseModel):
    serviceName: NonEmpty = None
    serviceType: ServiceType = None
    imageUrl: NonEmpty = None
    imagePublicId: NonEmpty = None
    description: Optional[str] = None
    isActive: bool = None


# Site settings (singleton)
class Setting(BaseModel):
    heroStoryId: Optional[ObjectIdStr] = None
    studioExperience: Count = 0
    weddingsCovered: Count = 0
    citiesServed: Count = 0


# Stories
class Story(BaseModel):
    title: NonEmpty
    eventType: NonEmpty
    location: NonEmpty
    coverImage: CoverImage
    gallery: List[StoryImage] = Field(default_factory=list)
    videos: List[StoryVideo] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    isFeatured: bool = False
    showOnHomepage: bool = False


class StoryUpdate(BaseModel):
    title: NonEmpty = None
    eventType: NonEmpty = None
    location: NonEmpty = None
    coverImage: CoverImage = None
    gallery: List[StoryImage] = None
    videos: List[StoryVideo] = None
    tags: List[str] = None
    isFeatured: bool = None
    showOnHomepage: bool = None


# Testimonials
class TestimonialImage(BaseModel):
    url: Url
    publicId: str


class Testimonial(BaseModel):
    clientName: NonEmpty
    quote: NonEmpty
    image: Optional[TestimonialImage] = None
    approved: bool = Field(False, description="Visible on the public site once approved")


class TestimonialUpdate(BaseModel):
    clientName: NonEmpty = None
    quote: NonEmpty = None
    image: Optional[TestimonialImage] = None
    approved: bool = None


# Wedding gallery
class WeddingGalleryImage(BaseModel):
    imageUrl: NonEmpty
    imagePublicId: NonEmpty
    photoType: PhotoType
    order: int = 0


class WeddingGalleryImageUpdate(BaseModel):
    id: NonEmpty
    order: int = None
    photoType: PhotoType = None


class WeddingGalleryImageDelete(BaseModel):
    id: NonEmpty
    imagePublicId: Optional[str] = None


# Wedding stories
class WeddingStory(BaseModel):
    title: NonEmpty
    coupleName: NonEmpty
    place: NonEmpty
    coverPhoto: Photo
    gallery: List[str] = Field(default_factory=list)


class WeddingStoryUpdate(BaseModel):
    title: NonEmpty = None
    coupleName: NonEmpty = None
    place: NonEmpty = None
    coverPhoto: Photo = None
    gallery: List[str] = None


# kind -> (create model, partial-update model)
KINDS: Dict[str, tuple] = {
    "admin": (Admin, None),
    "about": (About, AboutUpdate),
    "film": (Film, FilmUpdate),
    "footer": (Footer, FooterUpdate),
    "gallery": (Gallery, None),
    "hero": (Hero, HeroUpdate),
    "media": (Media, MediaUpdate),
    "ourstory": (OurStory, OurStoryUpdate),
    "reel": (Reel, ReelUpdate),
    "review": (Review, ReviewUpdate),
    "section": (Section, SectionUpdate),
    "service": (Service, ServiceUpdate),
    "setting": (Setting, None),
    "story": (Story, StoryUpdate),
    "testimonial": (Testimonial, TestimonialUpdate),
    "weddinggalleryimage": (WeddingGalleryImage, WeddingGalleryImageUpdate),
    "weddingstory": (WeddingStory, WeddingStoryUpdate),
}


def changes(payload: BaseModel) -> Dict[str, Any]:
    """
    Fields a partial update actually carries. Only top-level keys are
    filtered; nested sub-documents are dumped whole with their defaults.
    """
    data = payload.model_dump()
    return {k: data[k] for k in payload.model_fields_set}


def validate(kind: str, raw: Any, partial: bool = False) -> Dict[str, Any]:
    """
    Validate raw input for an entity kind.

    Returns the cleaned document (defaults filled in), or for partial=True
    only the fields that were supplied. Raises InvalidInput naming the
    first offending field.
    """
    try:
        create_model, update_model = KINDS[kind]
    except KeyError:
        raise ValueError(f"Unknown entity kind: {kind}")
    model: Type[BaseModel] = update_model if partial else create_model
    if model is None:
        raise ValueError(f"{kind} has no partial-update schema")
    try:
        parsed = model.model_validate(raw if raw is not None else {})
    except ValidationError as exc:
        errors = exc.errors()
        field = ".".join(str(p) for p in errors[0].get("loc", ())) if errors else None
        raise InvalidInput(describe_validation_errors(errors), field=field)
    return changes(parsed) if partial else parsed.model_dump()
