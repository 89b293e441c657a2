from setuptools import find_packages, setup

package_name = "rt_temporal"

setup(
	name=package_name,
	version="0.0.1",
	package_dir={"": "src"},
	packages=find_packages(where="src", include=["rt_temporal_commons*", "rt_temporal_core*"]),
	python_requires=">=3.11",
	install_requires=[
		"numpy>=1.24",
		"pydantic>=2.5",
		"pydantic-settings>=2.1",
		"scipy>=1.10",
		"shapely~=2.0",
		"typing_extensions>=4.5",
	],
	extras_require={
		"test": [
			"hypothesis>=6.80",
			"pytest>=7.4",
		],
	},
	zip_safe=True,
	description="Spans, span sets and temporal values over booleans, numbers, texts and planar points.",
	license="UNLICENSED",
)
