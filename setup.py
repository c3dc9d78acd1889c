"""
Packaging script for PyPI.
"""
import setuptools

setuptools.setup(
	name='signet',
	author='Beth Kjos',
	author_email='kjosib@gmail.com',
	version='0.1.0',
	packages=['signet', ],
	license='MIT',
	description='Run-time type signatures, dependent contracts, and duck types for Python functions',
	long_description=open('README.md').read(),
	long_description_content_type="text/markdown",
	classifiers=[
		"Programming Language :: Python :: 3.10",
		"License :: OSI Approved :: MIT License",
		"Operating System :: OS Independent",
		"Development Status :: 3 - Alpha",
		"Intended Audience :: Developers",
		"Topic :: Software Development :: Libraries",
		"Topic :: Software Development :: Quality Assurance",
    ],
	python_requires='>=3.10',
	install_requires=[
		"booze-tools>=0.6.2.1",
	]
)
