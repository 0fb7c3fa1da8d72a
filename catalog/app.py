# catalog/app.py

import streamlit as st
import requests
import base64
import binascii
import json
import pandas as pd
from typing import List, Optional
from models import Product
from config import get_settings
from logger import configure_logging, get_logger

configure_logging()

# Create logger object
log = get_logger(__name__)
log.info("Streamlit dashboard is starting...")

API_URL = get_settings().api_url
TIMEOUT = 10


def main():
	# Page settings
	st.set_page_config(
	page_title="Sound System Catalog",
	page_icon="🔊",
	layout="centered"
	)

	st.title("Sound System Catalog")

	initialize_sessions()
	record_visit_once()

	# Sidebar: visitor stats and downloads
	with st.sidebar:
		st.header("📊 Stats")
		visits = fetch_visits()
		if visits is not None:
			st.metric("Visits", f"{visits:,}")
		else:
			st.write("Visits: Not available")

	products = fetch_products()

	if products:
		with st.sidebar:
			st.markdown("---")
			st.header("📥 Export")
			if download_datas(products, "json"):
				log.info("JSON file has been downloaded")
			if download_datas(products, "csv"):
				log.info("CSV file has been downloaded")

	run_add_product()

	st.header("Products")
	if products is None:
		st.error("Unable to load products from the API.")
	elif not products:
		st.info("No products yet. Add the first one above.")
	else:
		display_products(products)


def api_call(method: str, path: str, **kwargs) -> Optional[requests.Response]:
	"""Call the catalog API and return the response, or None on a connection problem."""
	url = f"{API_URL}{path}"
	try:
		log.debug(f"Calling API {method} {url}")
		return requests.request(method, url, timeout=TIMEOUT, **kwargs)
	except requests.exceptions.Timeout as e:
		st.error("API call timed out.")
		log.exception(f"Dashboard request timeout for {method} {url}: {e}")
	except requests.exceptions.ConnectionError as e:
		st.error("Unable to connect to API.")
		log.exception(f"Dashboard connection error for {method} {url}: {e}")
	return None


def record_visit_once():
	"""Count one visit per browser session."""
	if st.session_state.visit_recorded:
		return
	response = api_call("POST", "/api/stats/visit")
	if response is not None and response.status_code == 200:
		st.session_state.visit_recorded = True
		log.info(f"Visit recorded, total {response.json().get('visits')}")


def fetch_visits() -> Optional[int]:
	response = api_call("GET", "/api/stats")
	if response is None or response.status_code != 200:
		return None
	return response.json().get("visits") or 0


def fetch_products() -> Optional[List[dict]]:
	response = api_call("GET", "/api/products")
	if response is None:
		return None
	if response.status_code != 200:
		log.error(f"API returned unexpected status code {response.status_code} for product list. Response: {response.text}")
		return None
	return response.json()


def encode_upload(upload) -> str:
	"""Uploaded file -> base64 data URL stored as the product image."""
	mime = upload.type or "application/octet-stream"
	payload = base64.b64encode(upload.getvalue()).decode("ascii")
	return f"data:{mime};base64,{payload}"


def decode_image(image):
	"""Turn a stored image payload into something st.image can render."""
	if not isinstance(image, str):
		return None
	if image.startswith("data:") and "," in image:
		header, payload = image.split(",", 1)
		if ";base64" not in header:
			return None
		try:
			return base64.b64decode(payload)
		except (binascii.Error, ValueError):
			return None
	if image.startswith(("http://", "https://")):
		return image
	return None


def show_api_error(response: requests.Response, action: str):
	try:
		message = response.json().get("error") or response.text
	except ValueError:
		message = response.text
	st.error(f"{action} failed ({response.status_code}): {message}")
	log.error(f"{action} failed with status {response.status_code}: {message}")


def run_add_product():
	"""Form for a new product. The image is uploaded and stored inline."""
	st.header("Add Product")
	with st.form("add_product", clear_on_submit=True):
		name = st.text_input("Name", placeholder="Ex: Speaker")
		description = st.text_area("Description")
		upload = st.file_uploader("Image", type=["png", "jpg", "jpeg", "gif", "webp"])
		alt = st.text_input("Alt text", placeholder="Ex: speaker")
		submitted = st.form_submit_button("Add", type="primary")

	if not submitted:
		return

	body = {
		"name": name.strip(),
		"description": description.strip(),
		"image": encode_upload(upload) if upload else "",
		"alt": alt.strip(),
	}
	log.info(f"Add button clicked. Name: '{body['name']}'")
	response = api_call("POST", "/api/products", json=body)
	if response is None:
		return
	if response.status_code == 201:
		created = response.json()
		st.success(f"Product #{created['id']} added")
		log.info(f"Product created with id {created['id']}")
		st.rerun()
	else:
		show_api_error(response, "Add product")


def display_products(products: List[dict]):
	"""Display products with edit and delete controls."""
	for product in products:
		product_id = product.get("id")
		with st.container():
			col1, col2 = st.columns([1,3])

			with col1:
				image = decode_image(product.get("image"))
				if image is not None:
					try:
						st.image(image, caption=product.get("alt"), width=150)
					except Exception as e:
						st.write("🖼️ Image not available")
						log.warning(f"Cannot render image of product {product_id}: {e}")
				else:
					st.write("🖼️ No image")

			with col2:
				st.subheader(f"#{product_id} {product.get('name', '')}")
				st.write(product.get("description", ""))

				col2_1, col2_2 = st.columns(2)
				with col2_1:
					if st.button("Edit", key=f"edit_{product_id}"):
						st.session_state.editing_id = product_id
				with col2_2:
					if st.button("Delete", key=f"delete_{product_id}"):
						delete_product(product_id)

			if st.session_state.editing_id == product_id:
				run_edit_product(product)
			st.divider()


def run_edit_product(product: dict):
	product_id = product.get("id")
	with st.form(f"edit_product_{product_id}"):
		name = st.text_input("Name", value=product.get("name") or "")
		description = st.text_area("Description", value=product.get("description") or "")
		upload = st.file_uploader("Replace image", type=["png", "jpg", "jpeg", "gif", "webp"])
		alt = st.text_input("Alt text", value=product.get("alt") or "")
		col1, col2 = st.columns(2)
		with col1:
			saved = st.form_submit_button("Save", type="primary")
		with col2:
			cancelled = st.form_submit_button("Cancel")

	if cancelled:
		st.session_state.editing_id = None
		st.rerun()
	if not saved:
		return

	body = {
		"name": name.strip(),
		"description": description.strip(),
		"image": encode_upload(upload) if upload else product.get("image"),
		"alt": alt.strip(),
	}
	response = api_call("PUT", f"/api/products/{product_id}", json=body)
	if response is None:
		return
	if response.status_code == 200:
		st.session_state.editing_id = None
		log.info(f"Product {product_id} updated")
		st.rerun()
	else:
		show_api_error(response, "Update product")


def delete_product(product_id):
	response = api_call("DELETE", f"/api/products/{product_id}")
	if response is None:
		return
	if response.status_code == 200:
		log.info(f"Product {product_id} deleted")
		st.rerun()
	elif response.status_code == 404:
		st.info("Product has already been deleted.")
		log.warning(f"API returned 404 deleting product {product_id}")
	else:
		show_api_error(response, "Delete product")


def download_datas(products: List[dict], data_type: str):
	"""
	Download the catalog as JSON or CSV.

	Args:
		products: List[dict] : Products as returned by the API
		data_type: str : 'json' or 'csv'
	"""
	if data_type == "json":
		return st.download_button(
			label = "📥 Download Catalog as JSON File",
			data = json.dumps(products, indent=2, ensure_ascii=False),
			file_name = "products.json",
			mime = "application/json"
		)

	# CSV leaves out the inline image payloads
	rows = []
	for product in products:
		row = {name: product.get(name) for name in Product.model_fields if name != "image"}
		rows.append(row)
	return st.download_button(
		label = "📥 Download Catalog as CSV File",
		data = pd.DataFrame(rows).to_csv(index=False).encode("utf-8"),
		file_name = "products.csv",
		mime = "text/csv"
	)


def initialize_sessions():
	"""Initialize session state variables."""
	if "visit_recorded" not in st.session_state:
		st.session_state.visit_recorded = False
		log.debug("Session state 'visit_recorded' initialized.")
	if "editing_id" not in st.session_state:
		st.session_state.editing_id = None
		log.debug("Session state 'editing_id' initialized.")


if __name__ == "__main__":
	main()
