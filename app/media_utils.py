import os
import io
from PIL import Image

MAX_IMAGE_SIZE = int(os.getenv("MAX_IMAGE_SIZE", "1280"))

def resize_image(image_bytes: bytes) -> bytes:
    """Downscale to MAX_IMAGE_SIZE on the long edge and re-encode as JPEG."""
    img = Image.open(io.BytesIO(image_bytes)).convert("RGB")
    img.thumbnail((MAX_IMAGE_SIZE, MAX_IMAGE_SIZE))

    out = io.BytesIO()
    img.save(out, format="JPEG", quality=90, optimize=True)
    return out.getvalue()
