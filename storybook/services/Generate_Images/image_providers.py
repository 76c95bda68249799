import base64
import io
import logging
from dataclasses import dataclass
from typing import Optional

import requests
from google import genai
from google.genai import types
from PIL import Image

from storybook.utils.errors import ImageProviderError
from storybook.utils.image_store import ImageStore
from storybook.utils.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class ProviderImage:
    """An image returned by a provider: a hosted URL or raw bytes"""
    url: Optional[str] = None
    data: Optional[bytes] = None


class SeedreamImageProvider:
    """BytePlus ARK Seedream image generation over REST"""

    def __init__(self, api_key: Optional[str], model: str, base_url: str, image_store: ImageStore, timeout: float = 120.0):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.image_store = image_store
        self.timeout = timeout

    def generate(self, prompt: str, reference_image: Optional[str] = None) -> ProviderImage:
        headers = {
            'Authorization': f'Bearer {self.api_key}',
            'Content-Type': 'application/json'
        }
        payload = {
            'model': self.model,
            'prompt': prompt,
            'size': '1024x1024',
            'watermark': False,
            'response_format': 'url'
        }

        # Hosted references go by URL, our own files are sent inline
        if reference_image:
            if reference_image.startswith('http'):
                payload['style_reference_url'] = reference_image
            else:
                reference_bytes = self.image_store.load(reference_image)
                payload['style_reference_image'] = base64.b64encode(reference_bytes).decode('utf-8')

        try:
            response = requests.post(self.base_url, headers=headers, json=payload, timeout=self.timeout)
            response.raise_for_status()
            result = response.json()
        except requests.exceptions.Timeout as e:
            raise ImageProviderError(f"Image generation timed out after {self.timeout} seconds") from e
        except (requests.exceptions.RequestException, ValueError) as e:
            raise ImageProviderError(f"Seedream request failed: {str(e)}") from e

        data = result.get('data') or [{}]
        item = data[0]
        if item.get('url'):
            return ProviderImage(url=item['url'])
        if item.get('b64_json'):
            return ProviderImage(data=base64.b64decode(item['b64_json']))
        raise ImageProviderError(f"No image in response: {result}")


class GeminiImageProvider:
    """Google Gemini image model; images come back as inline bytes"""

    def __init__(self, api_key: Optional[str], model: str, image_store: ImageStore, timeout: float = 120.0, client=None):
        self.api_key = api_key
        self.model = model
        self.image_store = image_store
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(
                api_key=self.api_key,
                http_options=types.HttpOptions(timeout=int(self.timeout * 1000)),
            )
        return self._client

    def generate(self, prompt: str, reference_image: Optional[str] = None) -> ProviderImage:
        contents = [prompt]
        if reference_image:
            reference_bytes = self.image_store.load(reference_image)
            image_format = Image.open(io.BytesIO(reference_bytes)).format
            mime_type = Image.MIME.get(image_format, 'image/png')
            contents.append(types.Part.from_bytes(data=reference_bytes, mime_type=mime_type))

        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=contents,
                config=types.GenerateContentConfig(response_modalities=['TEXT', 'IMAGE']),
            )
        except Exception as e:
            raise ImageProviderError(f"Gemini request failed: {str(e)}") from e

        for candidate in response.candidates or []:
            if candidate.content is None:
                continue
            for part in candidate.content.parts or []:
                if part.inline_data is not None and part.inline_data.data:
                    return ProviderImage(data=part.inline_data.data)
        raise ImageProviderError("Gemini response contained no image")


def build_image_provider(settings: Settings, image_store: ImageStore):
    if settings.image_provider == "gemini":
        return GeminiImageProvider(
            api_key=settings.gemini_api_key,
            model=settings.gemini_image_model,
            image_store=image_store,
            timeout=settings.provider_timeout,
        )
    if settings.image_provider == "seedream":
        return SeedreamImageProvider(
            api_key=settings.ark_api_key,
            model=settings.ark_model,
            base_url=settings.ark_base_url,
            image_store=image_store,
            timeout=settings.provider_timeout,
        )
    raise ValueError(f"Unknown image provider: {settings.image_provider}")
